# nosec B101


from unittest.mock import AsyncMock, Mock

import pytest

from api import main


@pytest.mark.asyncio
async def test_lifespan_adopts_environment_locale_before_wiring(monkeypatch):
    calls = Mock()
    monkeypatch.setattr(main, 'configure_logging', calls.configure_logging)
    monkeypatch.setattr(main, 'adopt_environment_locale', calls.adopt_environment_locale)
    monkeypatch.setattr(main, 'init_dependencies', calls.init_dependencies)
    monkeypatch.setattr(main, 'bootstrap', AsyncMock())
    monkeypatch.setattr(main, 'cleanup_dependencies', AsyncMock())

    async with main.lifespan(main.app):
        pass

    called = [name for name, _, _ in calls.mock_calls]
    assert called == ['configure_logging', 'adopt_environment_locale', 'init_dependencies']
    main.bootstrap.assert_awaited_once()
    main.cleanup_dependencies.assert_awaited_once()
