"""
Market data infrastructure.

This module provides CSV and in-memory market data sources together with
the OHLCV cleaning, validation and resampling they rely on.
"""

from .csv_market_data import CSVMarketDataSource
from .memory_source import InMemoryMarketDataSource
from .ohlcv_cleaner import OHLCVCleaner
from .ohlcv_resampler import OHLCVResampler
from .ohlcv_validator import OHLCVValidator

__all__ = [
    "CSVMarketDataSource",
    "InMemoryMarketDataSource",
    "OHLCVCleaner",
    "OHLCVResampler",
    "OHLCVValidator",
]
