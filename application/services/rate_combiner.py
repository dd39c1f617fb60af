import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from domain.exceptions.currency import RateValidationError
from domain.models.currency import ONE_COIN, ExchangeRate, MarketQuote, RateTable

logger = logging.getLogger(__name__)

MILLI_PRECISION = 6
SATOSHI_CODE = 'SATOSHI'
SATOSHI_PRECISION = 2


class RateCombiner:
    """Builds the full rate table from the market quotes and the fiat basket.

    Fiat prices are quoted for the anchor asset, so each one is re-based through
    the base asset's price in the reference market (the first quote). The
    reference market also yields unit, milli and satoshi entries, the base asset
    gets a 1:1 entry, and every other market quote is listed as-is. Those direct
    entries are written after the basket and win any code collision.
    """

    def __init__(self, base_asset_code: str = 'GLT', fiat_source: str = 'BitcoinAverage.com'):
        self.base_asset_code = base_asset_code
        self.fiat_source = fiat_source

    def combine(self, quotes: Sequence[MarketQuote], basket: Mapping[str, Decimal]) -> RateTable:
        if not quotes:
            raise ValueError('At least the reference market quote is required')

        reference = quotes[0]
        reference_price = reference.price
        rates: list[ExchangeRate] = []

        for code, anchor_price in basket.items():
            self._append(rates, code, anchor_price * reference_price, self.fiat_source)

        self._append(rates, reference.currency_code, reference_price, reference.source)
        self._append(
            rates,
            f'm{reference.currency_code}',
            reference_price * 1000,
            reference.source,
            places=MILLI_PRECISION,
        )
        self._append(rates, SATOSHI_CODE, reference_price * ONE_COIN, reference.source, places=SATOSHI_PRECISION)
        self._append(rates, self.base_asset_code, Decimal(1), reference.source)

        for quote in quotes[1:]:
            self._append(rates, quote.currency_code, quote.price, quote.source)

        return RateTable(rates)

    @staticmethod
    def _append(rates: list[ExchangeRate], code: str, price: Decimal, source: str, places: int = 8) -> None:
        try:
            rates.append(ExchangeRate.from_price(code, price, source, places=places))
        except RateValidationError as e:
            logger.debug(f'Dropping {code} from {source}: {e}')
