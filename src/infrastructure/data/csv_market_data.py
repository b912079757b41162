"""
CSV market data source.

Serves candles from per-symbol CSV files laid out as::

    <data_directory>/<SYMBOL>/<interval>.csv

with columns ``timestamp`` (milliseconds since epoch), ``open``, ``high``,
``low``, ``close`` and ``volume``. When a coarser interval has no file of
its own it is resampled from the base interval file.
"""

from datetime import datetime
from pathlib import Path
from threading import RLock

import pandas as pd
from cachetools import LRUCache
from loguru import logger

from src.core.enums import Timeframe
from src.core.exceptions.backtest import DataError, DataUnavailableError, ValidationError
from src.core.interfaces.data import IMarketDataSource
from src.core.models.market import Candle

from .csv_utils import CSVUtils
from .ohlcv_cleaner import OHLCVCleaner
from .ohlcv_resampler import OHLCVResampler
from .ohlcv_validator import OHLCV_COLUMNS

_CSV_DTYPES = {
    "open": "float64",
    "high": "float64",
    "low": "float64",
    "close": "float64",
    "volume": "float64",
}


class CSVMarketDataSource(IMarketDataSource):
    """
    CSV-backed market data source with an LRU cache of cleaned frames.

    Features:
    - Path sanitization for symbols and intervals
    - Cleaning and validation of every file on first load
    - Resampling from the base interval when a file is missing
    - Thread-safe cache, so concurrent runs can share one instance
    """

    DEFAULT_CACHE_SIZE = 32

    def __init__(
        self,
        data_directory: str | Path = "data",
        cache_size: int = DEFAULT_CACHE_SIZE,
        base_interval: Timeframe = Timeframe.H1,
    ):
        """
        Initialize the CSV market data source.

        Args:
            data_directory: Root directory containing one folder per symbol
            cache_size: Maximum number of cached frames
            base_interval: Interval that coarser intervals are resampled from
        """
        if cache_size <= 0:
            raise ValueError("Cache size must be positive")

        self.data_dir = Path(data_directory)
        CSVUtils.validate_data_directory(self.data_dir)
        self.base_interval = base_interval
        self._cache: LRUCache[tuple[str, str], pd.DataFrame] = LRUCache(maxsize=cache_size)
        self._cache_lock = RLock()
        self._cleaner = OHLCVCleaner()
        self._resampler = OHLCVResampler()

    def get_candles(
        self, symbol: str, start: datetime, end: datetime, interval: str
    ) -> list[Candle]:
        """
        Load candles for ``symbol`` in ``[start, end]``.

        Raises:
            ValidationError: If symbol or interval are not usable as file names
            DataUnavailableError: If no candles exist for the window
            DataError: If a file cannot be read or is corrupt
        """
        safe_symbol = CSVUtils.sanitize_path_component(symbol.strip().upper(), "symbol")
        try:
            timeframe = Timeframe.from_string(interval)
        except ValueError as e:
            raise ValidationError(str(e), field="interval") from e

        frame = self._get_frame(safe_symbol, timeframe)
        window = CSVUtils.filter_by_date_range(frame, start, end)
        if window.empty:
            raise DataUnavailableError(
                safe_symbol, f"no {timeframe} candles between {start.date()} and {end.date()}"
            )

        candles = CSVUtils.frame_to_candles(window)
        logger.debug(f"Serving {len(candles)} {timeframe} candles for {safe_symbol}")
        return candles

    def _get_frame(self, symbol: str, timeframe: Timeframe) -> pd.DataFrame:
        key = (symbol, timeframe.value)
        with self._cache_lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        frame = self._load_frame(symbol, timeframe)
        with self._cache_lock:
            self._cache[key] = frame
        return frame

    def _load_frame(self, symbol: str, timeframe: Timeframe) -> pd.DataFrame:
        path = self._csv_path(symbol, timeframe)
        if path.exists():
            return self._read_csv(path)

        if timeframe != self.base_interval and self._csv_path(symbol, self.base_interval).exists():
            logger.info(f"No {timeframe} file for {symbol}, resampling from {self.base_interval}")
            base_frame = self._get_frame(symbol, self.base_interval)
            return self._resampler.resample(base_frame, timeframe)

        raise DataUnavailableError(symbol, f"no data file for interval {timeframe}")

    def _csv_path(self, symbol: str, timeframe: Timeframe) -> Path:
        path = self.data_dir / symbol / f"{timeframe.value}.csv"
        CSVUtils.validate_path_safety(path, self.data_dir)
        return path

    def _read_csv(self, path: Path) -> pd.DataFrame:
        logger.debug(f"Loading file: {path}")
        try:
            raw = pd.read_csv(path, dtype=_CSV_DTYPES)
        except pd.errors.EmptyDataError:
            logger.warning(f"Empty data file: {path}")
            return pd.DataFrame(columns=OHLCV_COLUMNS)
        except (pd.errors.ParserError, ValueError, TypeError) as e:
            logger.error(f"CSV parsing error ({type(e).__name__}) in {path.name}: {e}")
            raise DataError(f"Failed to parse CSV file: {path}") from e
        except OSError as e:
            logger.error(f"File system error loading {path.name}: {e}")
            raise DataError(f"File system error loading {path}") from e

        frame = self._cleaner.clean(raw, source=path.name)
        logger.info(f"Loaded {len(frame)} rows from {path}")
        return frame

    def get_available_symbols(self) -> list[str]:
        """Symbols with a data folder."""
        return CSVUtils.get_available_symbols(self.data_dir)

    def get_available_intervals(self, symbol: str) -> list[str]:
        """Intervals with a CSV file for ``symbol``."""
        safe_symbol = CSVUtils.sanitize_path_component(symbol.strip().upper(), "symbol")
        return CSVUtils.get_available_intervals(self.data_dir, safe_symbol)

    def clear_cache(self) -> None:
        """Clear the frame cache (thread-safe)."""
        with self._cache_lock:
            self._cache.clear()

    def get_cache_info(self) -> dict[str, int]:
        """Get cache statistics (thread-safe)."""
        with self._cache_lock:
            return {"cache_size": len(self._cache), "max_cache_size": int(self._cache.maxsize)}
