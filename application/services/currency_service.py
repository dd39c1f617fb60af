import locale
import logging
from collections.abc import Mapping

from domain.exceptions.currency import InvalidCurrencyError
from domain.models.currency import ExchangeRate

logger = logging.getLogger(__name__)

SYSTEM_DEFAULT_CURRENCY = 'USD'

CURRENCY_SYMBOLS: dict[str, str] = {
	'USD': '$',
	'EUR': '€',
	'GBP': '£',
	'JPY': '¥',
	'CNY': '¥',
	'INR': '₹',
	'KRW': '₩',
	'RUB': '₽',
	'TRY': '₺',
	'ILS': '₪',
	'NGN': '₦',
	'UAH': '₴',
	'PHP': '₱',
	'VND': '₫',
	'THB': '฿',
	'PLN': 'zł',
	'BRL': 'R$',
	'AUD': 'A$',
	'CAD': 'CA$',
	'NZD': 'NZ$',
	'HKD': 'HK$',
	'MXN': 'MX$',
	'BTC': 'Ƀ',
	'mBTC': 'mɃ',
	'LTC': 'Ł',
	'DOGE': 'Ð',
}


def adopt_environment_locale() -> bool:
	"""Switch LC_MONETARY from the interpreter's "C" default to the one named by LANG/LC_*."""
	try:
		locale.setlocale(locale.LC_MONETARY, '')
	except locale.Error as e:
		logger.warning(f'Keeping the C monetary locale, environment locale is unusable: {e}')
		return False
	logger.info(f'Monetary locale {locale.setlocale(locale.LC_MONETARY)}, currency {locale_currency_code()}')
	return True


def locale_currency_code() -> str | None:
	"""ISO code of the process locale's currency, if the monetary locale defines one."""
	code = locale.localeconv().get('int_curr_symbol', '').strip()
	if len(code) >= 3 and code[:3].isalpha():
		return code[:3].upper()
	return None


def validate_currency_code(code: str) -> str:
	code = code.strip()
	if not 3 <= len(code) <= 7 or not code.isalnum():
		raise InvalidCurrencyError(f'Currency code {code!r} is not valid')
	return code


class CurrencyService:
	"""Currency preferences of the host process and the lookups derived from them."""

	def __init__(
		self,
		exchange_currency_code: str | None = None,
		locale_currency_code: str | None = None,
		default_currency_code: str = SYSTEM_DEFAULT_CURRENCY,
		symbols: Mapping[str, str] | None = None,
	):
		self.exchange_currency_code = exchange_currency_code
		self._locale_currency_code = locale_currency_code
		self.default_currency_code = default_currency_code
		self.symbols = CURRENCY_SYMBOLS if symbols is None else symbols

	def locale_currency_code(self) -> str | None:
		if self._locale_currency_code:
			return self._locale_currency_code
		return locale_currency_code()

	def fallback_codes(self, code: str | None) -> list[str]:
		"""Codes to try, in order, when looking up the best rate for `code`."""
		candidates = [code, self.exchange_currency_code, self.locale_currency_code(), self.default_currency_code]
		codes: list[str] = []
		for candidate in candidates:
			if candidate and candidate not in codes:
				codes.append(candidate)
		return codes

	def best_exchange_rate(self, rates: Mapping[str, ExchangeRate], code: str | None) -> ExchangeRate | None:
		for candidate in self.fallback_codes(code):
			rate = rates.get(candidate)
			if rate is not None:
				if candidate != code:
					logger.debug(f'No rate for {code}, falling back to {candidate}')
				return rate
		return None

	def currency_symbol(self, code: str) -> str:
		return self.symbols.get(code, code)
