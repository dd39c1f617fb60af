import logging
import time
from decimal import Decimal
from typing import Any

import httpx

from domain.exceptions.currency import ParseError, ProviderError

from .base import MarketDataProvider, parse_decimal

logger = logging.getLogger(__name__)

BITCOINAVERAGE_SOURCE = 'BitcoinAverage.com'


class BitcoinAverageProvider(MarketDataProvider):
    """Day-average prices of the anchor asset in every fiat currency BitcoinAverage tracks."""

    def __init__(
        self,
        url: str,
        user_agent: str,
        anchor_code: str = 'BTC',
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        super().__init__(url=url, source=BITCOINAVERAGE_SOURCE, user_agent=user_agent, client=client, timeout=timeout)
        self.anchor_code = anchor_code
        self.excluded_codes = frozenset({anchor_code, f'm{anchor_code}', f'µ{anchor_code}'})

    async def fetch(self) -> dict[str, Decimal] | None:
        """Return fiat code -> anchor price, or None if the ticker could not be read at all."""
        start_time = time.perf_counter()
        try:
            response = await self._get()
            data = self._decode(response)
            if not isinstance(data, dict):
                raise ParseError(f'expected a JSON object, got {type(data).__name__}', url=self.url)
        except ProviderError as e:
            logger.warning(f'Problem fetching exchange rates from {self.url}: {e}')
            return None

        rates: dict[str, Decimal] = {}
        for pair_code, ticker in data.items():
            fiat_code = self._fiat_leg(pair_code)
            if fiat_code is None:
                continue
            try:
                rates[fiat_code] = self._extract_day_average(ticker)
            except ParseError as e:
                logger.warning(f'Problem fetching {pair_code} exchange rate from {self.url}: {e}')

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f'Fetched exchange rates from {self.url}, {len(response.text)} chars, '
            f'{len(rates)} currencies, took {elapsed_ms:.0f}ms'
        )
        return rates

    def _fiat_leg(self, pair_code: str) -> str | None:
        if not pair_code.startswith(self.anchor_code):
            return None
        fiat_code = pair_code[len(self.anchor_code):]
        if fiat_code in self.excluded_codes:
            return None
        # ISO 4217 style codes only
        if len(fiat_code) != 3 or not fiat_code.isalpha() or not fiat_code.isupper():
            return None
        return fiat_code

    def _extract_day_average(self, ticker: Any) -> Decimal:
        averages = ticker.get('averages') if isinstance(ticker, dict) else None
        if not isinstance(averages, dict) or 'day' not in averages:
            raise ParseError('missing averages.day', url=self.url)
        return parse_decimal(averages['day'], 'averages.day', self.url)
