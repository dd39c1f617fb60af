# nosec B101


from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from application.services.currency_service import CurrencyService
from application.services.query_service import RateQueryService
from application.services.rate_service import RateService
from domain.exceptions.currency import InvalidCurrencyError, RatesUnavailableError
from domain.models.currency import ONE_COIN, ExchangeRate, RateSnapshot, RateTable, stable_code_hash

LAST_UPDATED = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def rate(code: str, fiat: int, source: str = 'BitcoinAverage.com') -> ExchangeRate:
    return ExchangeRate(currency_code=code, rate_coin=ONE_COIN, rate_fiat=fiat, source=source)


TABLE = RateTable([
    rate('USD', 5535015),
    rate('EUR', 4689184),
    rate('BTC', 123, 'Coinexchange.io'),
    rate('mBTC', 123000, 'Coinexchange.io'),
    rate('SATOSHI', 12_300_000_000, 'Coinexchange.io'),
    rate('GLT', ONE_COIN, 'Coinexchange.io'),
    rate('LTC', 12500, 'Novaexchange.com'),
])


def query_service(table=TABLE, last_updated=LAST_UPDATED, **currency_kwargs) -> RateQueryService:
    rate_service = Mock(spec=RateService)
    rate_service.get_snapshot = AsyncMock(return_value=RateSnapshot(table=table, last_updated=last_updated))
    currency_kwargs.setdefault('locale_currency_code', 'GBP')
    return RateQueryService(rate_service=rate_service, currency_service=CurrencyService(**currency_kwargs))


def codes(result) -> list[str]:
    return [row.currency_code for row in result.rows]


@pytest.mark.asyncio
async def test_query_without_filters_returns_every_rate_in_order():
    result = await query_service().query()

    assert codes(result) == ['BTC', 'EUR', 'GLT', 'LTC', 'SATOSHI', 'USD', 'mBTC']
    assert result.last_updated == LAST_UPDATED


@pytest.mark.asyncio
async def test_rows_carry_stable_ids():
    result = await query_service().query()

    by_code = {row.currency_code: row for row in result.rows}
    assert by_code['USD'].id == 84326 == stable_code_hash('USD')
    assert by_code['BTC'].id == 66097
    assert by_code['USD'].rate_coin == ONE_COIN
    assert by_code['USD'].rate_fiat == 5535015
    assert by_code['USD'].source == 'BitcoinAverage.com'


@pytest.mark.asyncio
async def test_fuzzy_query_matches_code_case_insensitively():
    lower = await query_service().query(fuzzy='bt')
    upper = await query_service().query(fuzzy='BT')

    assert codes(lower) == ['BTC', 'mBTC']
    assert codes(upper) == codes(lower)


@pytest.mark.asyncio
async def test_fuzzy_query_matches_currency_symbol():
    result = await query_service().query(fuzzy='€')

    assert codes(result) == ['EUR']


@pytest.mark.asyncio
async def test_fuzzy_query_without_match_is_empty():
    result = await query_service().query(fuzzy='zzz')

    assert result.rows == ()
    assert result.last_updated == LAST_UPDATED


@pytest.mark.asyncio
async def test_exact_query_returns_matching_rate():
    result = await query_service().query(exact_code='EUR')

    assert codes(result) == ['EUR']


@pytest.mark.asyncio
async def test_exact_query_falls_back_to_exchange_currency():
    result = await query_service(exchange_currency_code='EUR').query(exact_code='JPY')

    assert codes(result) == ['EUR']


@pytest.mark.asyncio
async def test_exact_query_falls_back_to_locale_then_default():
    table = RateTable([rate('GBP', 4100000), rate('USD', 5535015)])

    via_locale = await query_service(table=table).query(exact_code='JPY')
    via_default = await query_service(table=table, locale_currency_code='CHF').query(exact_code='JPY')

    assert codes(via_locale) == ['GBP']
    assert codes(via_default) == ['USD']


@pytest.mark.asyncio
async def test_exact_query_with_no_fallback_available_is_empty():
    table = RateTable([rate('BTC', 123, 'Coinexchange.io')])

    result = await query_service(table=table).query(exact_code='JPY')

    assert result.rows == ()


@pytest.mark.asyncio
async def test_exact_query_takes_precedence_over_fuzzy():
    result = await query_service().query(exact_code='USD', fuzzy='bt')

    assert codes(result) == ['USD']


@pytest.mark.asyncio
async def test_invalid_exact_code_is_rejected_before_refresh():
    service = query_service()

    with pytest.raises(InvalidCurrencyError):
        await service.query(exact_code='U$')

    service.rate_service.get_snapshot.assert_not_awaited()


@pytest.mark.asyncio
async def test_offline_flag_is_passed_through():
    service = query_service()

    await service.query(include_offline=True)

    service.rate_service.get_snapshot.assert_awaited_once_with(include_offline=True)


@pytest.mark.asyncio
async def test_unavailable_rates_propagate():
    service = query_service()
    service.rate_service.get_snapshot.side_effect = RatesUnavailableError('No exchange rates available yet')

    with pytest.raises(RatesUnavailableError):
        await service.query(fuzzy='usd')
