import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from application.services.currency_service import CurrencyService
from application.services.rate_combiner import RateCombiner
from domain.exceptions.currency import CacheError, RatesUnavailableError
from domain.models.currency import ExchangeRate, MarketQuote, RateSnapshot, RateTable
from infrastructure.providers import BitcoinAverageProvider, ConversionFetcher

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_FREQ = timedelta(minutes=10)


class BestGuessStore(Protocol):
    async def get_cached_best_guess(self) -> ExchangeRate | None:
        ...

    async def set_cached_best_guess(self, rate: ExchangeRate) -> None:
        ...

    async def close(self) -> None:
        ...


@dataclass(frozen=True)
class RefreshAborted:
    reason: str


@dataclass
class RefreshState:
    """Last known conversion price per market slot. A slot keeps its value until a fetch replaces it."""
    scalars: list[Decimal | None] = field(default_factory=list)


class RateService:
    """Owns the published rate table and refreshes it when it goes stale.

    Lifecycle: `start()` seeds the table from the persisted best guess,
    `get_snapshot()` refreshes on demand, `close()` releases providers and the store.
    """

    def __init__(
        self,
        conversion_fetchers: Sequence[ConversionFetcher],
        fiat_provider: BitcoinAverageProvider,
        combiner: RateCombiner,
        currency_service: CurrencyService,
        store: BestGuessStore,
        update_freq: timedelta = DEFAULT_UPDATE_FREQ,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        if not conversion_fetchers:
            raise ValueError('At least one conversion fetcher is required')
        self.conversion_fetchers = list(conversion_fetchers)
        self.fiat_provider = fiat_provider
        self.combiner = combiner
        self.currency_service = currency_service
        self.store = store
        self.update_freq = update_freq
        self._clock = clock

        self.state = RefreshState(scalars=[None] * len(self.conversion_fetchers))
        self._snapshot: RateSnapshot | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> RateSnapshot | None:
        return self._snapshot

    @property
    def last_updated(self) -> datetime | None:
        return self._snapshot.last_updated if self._snapshot else None

    async def start(self) -> None:
        try:
            cached = await self.store.get_cached_best_guess()
        except CacheError as e:
            logger.warning(f'Ignoring unreadable cached exchange rate: {e}')
            return

        if cached is not None and self._snapshot is None:
            self._snapshot = RateSnapshot(table=RateTable([cached]), last_updated=None)
            logger.info(f'Seeded exchange rates with cached {cached.currency_code} rate from {cached.source}')

    async def close(self) -> None:
        for fetcher in self.conversion_fetchers:
            await fetcher.close()
        await self.fiat_provider.close()
        await self.store.close()

    def is_stale(self, now: datetime | None = None) -> bool:
        last_updated = self.last_updated
        if last_updated is None:
            return True
        return (now or self._clock()) - last_updated > self.update_freq

    async def get_snapshot(self, include_offline: bool = False) -> RateSnapshot:
        """Current snapshot, refreshed first when stale unless `include_offline` is set."""
        if not include_offline:
            await self.refresh_if_stale()

        snapshot = self._snapshot
        if snapshot is None:
            raise RatesUnavailableError('No exchange rates available yet')
        return snapshot

    async def refresh_if_stale(self) -> bool:
        if not self.is_stale():
            return False

        async with self._refresh_lock:
            # another caller may have refreshed while we waited
            if not self.is_stale():
                return False
            return await self._refresh()

    async def _refresh(self) -> bool:
        start_time = time.perf_counter()

        fetched = await asyncio.gather(*(fetcher.fetch() for fetcher in self.conversion_fetchers))
        quotes = self._resolve_quotes(fetched)
        if isinstance(quotes, RefreshAborted):
            logger.warning(f'Exchange rate refresh aborted: {quotes.reason}')
            return False

        basket = await self.fiat_provider.fetch()
        if basket is None:
            logger.warning(f'Exchange rate refresh aborted: no fiat rates from {self.fiat_provider.source}')
            return False

        table = self.combiner.combine(quotes, basket)
        self._snapshot = RateSnapshot(table=table, last_updated=self._clock())

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f'Refreshed {len(table)} exchange rates, took {elapsed_ms:.0f}ms')

        await self._persist_best_guess(table)
        return True

    def _resolve_quotes(self, fetched: Sequence[Decimal | None]) -> list[MarketQuote] | RefreshAborted:
        """Fold fetch results over the cached slots in order, stopping at the first slot with no value."""
        quotes: list[MarketQuote] = []
        for slot, (fetcher, price) in enumerate(zip(self.conversion_fetchers, fetched, strict=True)):
            if price is not None:
                self.state.scalars[slot] = price
            elif self.state.scalars[slot] is None:
                return RefreshAborted(f'no {fetcher.quote_code} conversion from {fetcher.source} and none cached')
            else:
                logger.info(f'Reusing cached {fetcher.quote_code} conversion {self.state.scalars[slot]}')
            quotes.append(fetcher.to_quote(self.state.scalars[slot]))
        return quotes

    async def _persist_best_guess(self, table: RateTable) -> None:
        rate = self.currency_service.best_exchange_rate(table, self.currency_service.exchange_currency_code)
        if rate is None:
            return
        try:
            await self.store.set_cached_best_guess(rate)
        except CacheError as e:
            logger.warning(f'Failed to persist best exchange rate {rate.currency_code}: {e}')
