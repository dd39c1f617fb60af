from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from domain.models.currency import COIN_EXPONENT, FIAT_EXPONENT, RateRow


class ExchangeRateRowResponse(BaseModel):
	id: int = Field(..., description='Stable hash of the currency code')
	currency_code: str = Field(..., description='Currency code, including synthetic codes such as mBTC')
	rate_coin: int = Field(..., description='Base asset amount in smallest units')
	rate_fiat: int = Field(..., description='Quote currency amount in smallest units')
	source: str = Field(..., description='Provider the rate came from')
	price: Decimal = Field(..., description='Quote currency price of one whole base asset coin')

	@classmethod
	def from_row(cls, row: RateRow) -> 'ExchangeRateRowResponse':
		fiat = Decimal(row.rate_fiat).scaleb(-FIAT_EXPONENT)
		coin = Decimal(row.rate_coin).scaleb(-COIN_EXPONENT)
		return cls(
			id=row.id,
			currency_code=row.currency_code,
			rate_coin=row.rate_coin,
			rate_fiat=row.rate_fiat,
			source=row.source,
			price=fiat / coin,
		)

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'id': 84326,
				'currency_code': 'USD',
				'rate_coin': 100000000,
				'rate_fiat': 5535015,
				'source': 'BitcoinAverage.com',
				'price': '0.05535015',
			}
		}
	)


class ExchangeRatesResponse(BaseModel):
	rates: list[ExchangeRateRowResponse] = Field(description='Matching rates in currency code order')
	last_updated: datetime | None = Field(None, description='When the table was last refreshed')


class HealthResponse(BaseModel):
	status: str = Field(..., description='healthy, stale or unavailable')
	rate_count: int = Field(..., description='Number of rates in the current table')
	last_updated: datetime | None = Field(None, description='When the table was last refreshed')
