from abc import ABC
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from domain.exceptions.currency import ParseError, ProtocolError, TransportError


def parse_decimal(value: Any, field: str, url: str | None = None) -> Decimal:
    """Parse a JSON scalar through its text form so floats keep their printed digits."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ParseError(f'Field {field!r} is not numeric: {value!r}', url=url)
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ParseError(f'Field {field!r} is not numeric: {value!r}', url=url) from e
    if not parsed.is_finite():
        raise ParseError(f'Field {field!r} is not finite: {value!r}', url=url)
    return parsed


class MarketDataProvider(ABC):
    """A base class for market endpoints, handling common HTTP logic."""

    def __init__(
        self,
        url: str,
        source: str,
        user_agent: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        self.url = url
        self.source = source
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def _get(self) -> httpx.Response:
        try:
            response = await self._client.get(self.url, headers={'User-Agent': self.user_agent})
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise ProtocolError(
                f'http status {e.response.status_code} from {self.url}',
                url=self.url,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f'request to {self.url} failed: {e.__class__.__name__}', url=self.url) from e

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f'unparseable JSON from {self.url}: {e}', url=self.url) from e

    async def _request_json(self) -> Any:
        return self._decode(await self._get())

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def __repr__(self):
        return f'<{self.__class__.__name__}(source={self.source}, url={self.url})>'
