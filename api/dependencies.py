import logging
from datetime import timedelta

import httpx
from redis.asyncio import Redis

from application.services import (
	BestGuessStore,
	CurrencyService,
	RateCombiner,
	RateQueryService,
	RateService,
)
from config.settings import Settings, get_settings
from infrastructure.cache.redis_cache import RedisBestGuessStore
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import SqlBestGuessStore
from infrastructure.providers import (
	BitcoinAverageProvider,
	build_conversion_fetchers,
	default_market_specs,
)

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	http_client: httpx.AsyncClient | None = None
	rate_service: RateService | None = None
	query_service: RateQueryService | None = None


deps = AppDependencies()


def build_best_guess_store(settings: Settings) -> BestGuessStore:
	if settings.BEST_GUESS_BACKEND == 'redis':
		return RedisBestGuessStore(Redis.from_url(settings.REDIS_URL, decode_responses=True))
	return SqlBestGuessStore(Database(settings.DATABASE_URL))


def init_dependencies(settings: Settings | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = settings or get_settings()

	deps.http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS))

	specs = default_market_specs(settings.COINEXCHANGE_BTC_URL, settings.NOVAEXCHANGE_URL_TEMPLATE)
	fetchers = build_conversion_fetchers(specs, user_agent=settings.USER_AGENT, client=deps.http_client)
	fiat_provider = BitcoinAverageProvider(
		url=settings.BITCOINAVERAGE_URL,
		user_agent=settings.USER_AGENT,
		anchor_code=specs[0].quote_code,
		client=deps.http_client,
	)

	currency_service = CurrencyService(
		exchange_currency_code=settings.EXCHANGE_CURRENCY_CODE,
		locale_currency_code=settings.LOCALE_CURRENCY_CODE,
		default_currency_code=settings.DEFAULT_EXCHANGE_CURRENCY,
	)
	deps.rate_service = RateService(
		conversion_fetchers=fetchers,
		fiat_provider=fiat_provider,
		combiner=RateCombiner(base_asset_code=settings.BASE_ASSET_CODE, fiat_source=fiat_provider.source),
		currency_service=currency_service,
		store=build_best_guess_store(settings),
		update_freq=timedelta(seconds=settings.UPDATE_FREQ_SECONDS),
	)
	deps.query_service = RateQueryService(rate_service=deps.rate_service, currency_service=currency_service)
	logger.info(f'Dependencies initialized, {len(fetchers)} conversion markets configured')


async def bootstrap() -> None:
	"""Seed the rate table from the persisted best guess. Called after init_dependencies()."""
	if deps.rate_service is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')
	await deps.rate_service.start()


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.rate_service:
		await deps.rate_service.close()
	if deps.http_client:
		await deps.http_client.aclose()

	deps.rate_service = None
	deps.query_service = None
	deps.http_client = None
	logger.info('Cleanup complete')


def get_rate_service() -> RateService:
	if deps.rate_service is None:
		raise RuntimeError('Rate service not initialized')
	return deps.rate_service


def get_query_service() -> RateQueryService:
	if deps.query_service is None:
		raise RuntimeError('Query service not initialized')
	return deps.query_service
