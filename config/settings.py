from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	# Application
	APP_NAME: str = 'Exchange Rate Aggregator'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_DIRECTORY: str | None = None

	# Outbound HTTP
	USER_AGENT: str = 'ExchangeRateAggregator/1.0'
	HTTP_TIMEOUT_SECONDS: float = 15.0

	# Refresh
	UPDATE_FREQ_SECONDS: int = 10 * 60

	# Currencies
	BASE_ASSET_CODE: str = 'GLT'
	EXCHANGE_CURRENCY_CODE: str | None = None
	LOCALE_CURRENCY_CODE: str | None = None
	DEFAULT_EXCHANGE_CURRENCY: str = 'USD'

	# Best guess persistence
	BEST_GUESS_BACKEND: Literal['sqlite', 'redis'] = 'sqlite'
	DATABASE_URL: str = 'sqlite+aiosqlite:///./exchange_rates.db'
	REDIS_URL: str = 'redis://localhost:6379'

	# Market endpoints
	BITCOINAVERAGE_URL: str = 'https://apiv2.bitcoinaverage.com/indices/global/ticker/short?crypto=BTC'
	COINEXCHANGE_BTC_URL: str = 'https://www.coinexchange.io/api/v1/getmarketsummary?market_id=263'
	NOVAEXCHANGE_URL_TEMPLATE: str = 'https://novaexchange.com/remote/v2/market/info/{quote}_GLT/'

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
