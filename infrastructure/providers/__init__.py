from .base import MarketDataProvider
from .bitcoinaverage import BitcoinAverageProvider
from .conversion import (
    CoinexchangeFetcher,
    ConversionFetcher,
    MarketSchema,
    MarketSpec,
    NovaexchangeFetcher,
    build_conversion_fetchers,
    default_market_specs,
)

__all__ = [
    'MarketDataProvider',
    'BitcoinAverageProvider',
    'CoinexchangeFetcher',
    'ConversionFetcher',
    'MarketSchema',
    'MarketSpec',
    'NovaexchangeFetcher',
    'build_conversion_fetchers',
    'default_market_specs',
]
