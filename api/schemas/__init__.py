from .responses import ExchangeRateRowResponse, ExchangeRatesResponse, HealthResponse

__all__ = [
	'ExchangeRateRowResponse',
	'ExchangeRatesResponse',
	'HealthResponse',
]
