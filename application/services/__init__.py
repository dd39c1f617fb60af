from .currency_service import CurrencyService
from .query_service import RateQueryService
from .rate_combiner import RateCombiner
from .rate_service import BestGuessStore, RateService

__all__ = ['BestGuessStore', 'CurrencyService', 'RateCombiner', 'RateQueryService', 'RateService']
