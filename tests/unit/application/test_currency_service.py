# nosec B101


import locale
import logging

import pytest

from application.services import currency_service as currency_module
from application.services.currency_service import (
    CurrencyService,
    adopt_environment_locale,
    locale_currency_code,
    validate_currency_code,
)
from domain.exceptions.currency import InvalidCurrencyError
from domain.models.currency import ONE_COIN, ExchangeRate


def test_fallback_codes_order():
    service = CurrencyService(exchange_currency_code='EUR', locale_currency_code='GBP', default_currency_code='USD')

    assert service.fallback_codes('JPY') == ['JPY', 'EUR', 'GBP', 'USD']


def test_fallback_codes_skip_missing_and_duplicates():
    service = CurrencyService(exchange_currency_code='USD', locale_currency_code='USD')

    assert service.fallback_codes(None) == ['USD']
    assert service.fallback_codes('USD') == ['USD']


@pytest.fixture
def restore_monetary_locale():
    saved = locale.setlocale(locale.LC_MONETARY)
    yield
    locale.setlocale(locale.LC_MONETARY, saved)


def usable_locale(*names: str) -> str:
    for name in names:
        try:
            locale.setlocale(locale.LC_MONETARY, name)
        except locale.Error:
            continue
        return name
    pytest.skip(f'none of {names} is installed')


def test_c_monetary_locale_has_no_currency(restore_monetary_locale):
    locale.setlocale(locale.LC_MONETARY, 'C')

    assert locale_currency_code() is None
    assert CurrencyService().fallback_codes('JPY') == ['JPY', 'USD']


def test_adopted_environment_locale_supplies_currency(restore_monetary_locale, monkeypatch):
    name = usable_locale('en_US.UTF-8', 'en_US.utf8', 'en_US')
    locale.setlocale(locale.LC_MONETARY, 'C')
    monkeypatch.setenv('LC_ALL', name)

    assert adopt_environment_locale() is True
    assert locale_currency_code() == 'USD'
    assert CurrencyService(exchange_currency_code='EUR').fallback_codes('JPY') == ['JPY', 'EUR', 'USD']


def test_adopt_environment_locale_with_c_environment(restore_monetary_locale, monkeypatch):
    monkeypatch.setenv('LC_ALL', 'C')

    assert adopt_environment_locale() is True
    assert locale_currency_code() is None


def test_adopt_environment_locale_rejects_unknown_locale(restore_monetary_locale, monkeypatch, caplog):
    locale.setlocale(locale.LC_MONETARY, 'C')
    monkeypatch.setenv('LC_ALL', 'xx_XX.NOT-A-CHARSET')

    with caplog.at_level(logging.WARNING):
        assert adopt_environment_locale() is False

    assert locale.setlocale(locale.LC_MONETARY) == 'C'
    assert 'C monetary locale' in caplog.text


def test_locale_currency_trims_international_symbol(monkeypatch):
    monkeypatch.setattr(currency_module.locale, 'localeconv', lambda: {'int_curr_symbol': 'EUR '})

    assert locale_currency_code() == 'EUR'
    assert CurrencyService().locale_currency_code() == 'EUR'


def test_configured_locale_currency_overrides_process_locale(monkeypatch):
    monkeypatch.setattr(currency_module.locale, 'localeconv', lambda: {'int_curr_symbol': 'EUR '})

    assert CurrencyService(locale_currency_code='CHF').locale_currency_code() == 'CHF'


def test_best_exchange_rate_walks_fallbacks():
    usd = ExchangeRate(currency_code='USD', rate_coin=ONE_COIN, rate_fiat=5535015, source='BitcoinAverage.com')
    service = CurrencyService(exchange_currency_code='EUR', locale_currency_code='GBP')

    assert service.best_exchange_rate({'USD': usd}, 'JPY') == usd
    assert service.best_exchange_rate({}, 'JPY') is None


def test_currency_symbol_falls_back_to_code():
    service = CurrencyService()

    assert service.currency_symbol('EUR') == '€'
    assert service.currency_symbol('mBTC') == 'mɃ'
    assert service.currency_symbol('KIC') == 'KIC'


@pytest.mark.parametrize('code', ['USD', 'mBTC', 'SATOSHI', ' eur '])
def test_validate_currency_code_accepts(code):
    assert validate_currency_code(code) == code.strip()


@pytest.mark.parametrize('code', ['', 'US', 'TOOLONGCODE', 'U$D', 'US D'])
def test_validate_currency_code_rejects(code):
    with pytest.raises(InvalidCurrencyError):
        validate_currency_code(code)
