import json

from redis import asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.exceptions.currency import CacheError, RateValidationError
from domain.models.currency import ExchangeRate


class RedisBestGuessStore:
    """Keeps the single last-good exchange rate under one Redis key, without expiry."""

    def __init__(self, redis_client: redis.Redis, key: str = 'exchange_rates:best_guess'):
        self.redis = redis_client
        self.key = key

    async def get_cached_best_guess(self) -> ExchangeRate | None:
        try:
            data = await self.redis.get(self.key)
        except RedisError as e:
            raise CacheError(f'Redis read failed for {self.key}: {e}') from e

        if not data:
            return None

        try:
            rate_dict = json.loads(data)
            return ExchangeRate(
                currency_code=rate_dict['currency_code'],
                rate_coin=int(rate_dict['rate_coin']),
                rate_fiat=int(rate_dict['rate_fiat']),
                source=rate_dict['source'],
            )
        except (ValueError, KeyError, TypeError, RateValidationError) as e:
            raise CacheError(f'Invalid json data for {self.key}: {e}') from e

    async def set_cached_best_guess(self, rate: ExchangeRate) -> None:
        rate_dict = {
            'currency_code': rate.currency_code,
            'rate_coin': rate.rate_coin,
            'rate_fiat': rate.rate_fiat,
            'source': rate.source,
        }
        try:
            await self._write(json.dumps(rate_dict))
        except RedisError as e:
            raise CacheError(f'Redis write failed for {self.key}: {e}') from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
        reraise=True,
    )
    async def _write(self, payload: str) -> None:
        await self.redis.set(self.key, payload)

    async def close(self) -> None:
        await self.redis.aclose()
