import logging
from abc import abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Any

import httpx

from domain.exceptions.currency import ParseError, ProtocolError, ProviderError
from domain.models.currency import MarketQuote

from .base import MarketDataProvider, parse_decimal

logger = logging.getLogger(__name__)

COINEXCHANGE_SOURCE = 'Coinexchange.io'
NOVAEXCHANGE_SOURCE = 'Novaexchange.com'

REFERENCE_QUOTE = 'BTC'
NOVAEXCHANGE_QUOTES = ('DOGE', 'ESP2', 'KIC', 'LTC', 'MOON')


class MarketSchema(StrEnum):
    COINEXCHANGE = 'coinexchange'
    NOVAEXCHANGE = 'novaexchange'


@dataclass(frozen=True)
class MarketSpec:
    quote_code: str
    url: str
    source: str
    schema: MarketSchema


class ConversionFetcher(MarketDataProvider):
    """Fetches the last traded price of the base asset against one quote asset."""

    def __init__(
        self,
        quote_code: str,
        url: str,
        source: str,
        user_agent: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        super().__init__(url=url, source=source, user_agent=user_agent, client=client, timeout=timeout)
        self.quote_code = quote_code

    async def fetch(self) -> Decimal | None:
        """Return the last price, or None when the market could not be read."""
        try:
            data = await self._request_json()
            if not isinstance(data, dict):
                raise ParseError(f'expected a JSON object, got {type(data).__name__}', url=self.url)
            price = self._extract_last_price(data)
        except ProviderError as e:
            logger.warning(f"Couldn't get the {self.quote_code} conversion from {self.source} ({self.url}): {e}")
            return None

        if price <= 0:
            logger.warning(f'Ignoring non-positive {self.quote_code} price {price} from {self.source} ({self.url})')
            return None
        return price

    def to_quote(self, price: Decimal) -> MarketQuote:
        return MarketQuote(currency_code=self.quote_code, price=price, source=self.source)

    @abstractmethod
    def _extract_last_price(self, data: dict[str, Any]) -> Decimal:
        ...


class CoinexchangeFetcher(ConversionFetcher):
    def _extract_last_price(self, data: dict[str, Any]) -> Decimal:
        if str(data.get('success')) != '1':
            raise ProtocolError(f'market summary reported failure: {data.get("message", "no message")}', url=self.url)
        result = data.get('result')
        if not isinstance(result, dict) or 'LastPrice' not in result:
            raise ParseError('missing result.LastPrice', url=self.url)
        return parse_decimal(result['LastPrice'], 'LastPrice', self.url)


class NovaexchangeFetcher(ConversionFetcher):
    def _extract_last_price(self, data: dict[str, Any]) -> Decimal:
        if data.get('status') != 'success':
            raise ProtocolError(f'market info reported status {data.get("status")!r}', url=self.url)
        markets = data.get('markets')
        if not isinstance(markets, list) or not markets or not isinstance(markets[0], dict):
            raise ParseError('missing markets[0]', url=self.url)
        if 'last_price' not in markets[0]:
            raise ParseError('missing markets[0].last_price', url=self.url)
        return parse_decimal(markets[0]['last_price'], 'last_price', self.url)


FETCHER_VARIANTS: dict[MarketSchema, type[ConversionFetcher]] = {
    MarketSchema.COINEXCHANGE: CoinexchangeFetcher,
    MarketSchema.NOVAEXCHANGE: NovaexchangeFetcher,
}


def default_market_specs(coinexchange_url: str, novaexchange_url_template: str) -> list[MarketSpec]:
    """The six markets in slot order; slot 0 is the reference market."""
    specs = [MarketSpec(REFERENCE_QUOTE, coinexchange_url, COINEXCHANGE_SOURCE, MarketSchema.COINEXCHANGE)]
    specs.extend(
        MarketSpec(quote, novaexchange_url_template.format(quote=quote), NOVAEXCHANGE_SOURCE, MarketSchema.NOVAEXCHANGE)
        for quote in NOVAEXCHANGE_QUOTES
    )
    return specs


def build_conversion_fetchers(
    specs: Sequence[MarketSpec],
    user_agent: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = 15.0,
) -> list[ConversionFetcher]:
    return [
        FETCHER_VARIANTS[spec.schema](
            quote_code=spec.quote_code,
            url=spec.url,
            source=spec.source,
            user_agent=user_agent,
            client=client,
            timeout=timeout,
        )
        for spec in specs
    ]
