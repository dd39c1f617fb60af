from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError

from domain.exceptions.currency import CacheError, RateValidationError
from domain.models.currency import ExchangeRate
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import CachedExchangeRateDB

BEST_GUESS_SLOT = 'best_guess'


class SqlBestGuessStore:
	"""Single-row store for the last-good exchange rate in a local database file."""

	def __init__(self, database: Database, slot: str = BEST_GUESS_SLOT):
		self.database = database
		self.slot = slot

	async def get_cached_best_guess(self) -> ExchangeRate | None:
		try:
			async with self.database.session() as session:
				row = await session.get(CachedExchangeRateDB, self.slot)
		except SQLAlchemyError as e:
			raise CacheError(f'Failed to read cached exchange rate: {e}') from e

		if row is None:
			return None

		try:
			return ExchangeRate(
				currency_code=row.currency_code,
				rate_coin=row.rate_coin,
				rate_fiat=row.rate_fiat,
				source=row.source,
			)
		except RateValidationError as e:
			raise CacheError(f'Stored exchange rate is invalid: {e}') from e

	async def set_cached_best_guess(self, rate: ExchangeRate) -> None:
		try:
			async with self.database.session() as session:
				await session.merge(
					CachedExchangeRateDB(
						slot=self.slot,
						currency_code=rate.currency_code,
						rate_coin=rate.rate_coin,
						rate_fiat=rate.rate_fiat,
						source=rate.source,
						updated_at=datetime.now(UTC),
					)
				)
		except SQLAlchemyError as e:
			raise CacheError(f'Failed to write cached exchange rate: {e}') from e

	async def close(self) -> None:
		await self.database.close()
