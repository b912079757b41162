"""
CSV data utility functions.

Path safety checks, window filtering and conversion between OHLCV frames
and Candle objects.
"""

import re
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from src.core.exceptions.backtest import DataError, ValidationError
from src.core.models.market import Candle

from .ohlcv_validator import OHLCV_COLUMNS

_SAFE_COMPONENT = re.compile(r"^[A-Za-z0-9_.-]{1,50}$")


class CSVUtils:
    """Utility functions for CSV data operations."""

    @staticmethod
    def validate_data_directory(data_dir: Path) -> None:
        """Raise DataError if the data directory does not exist."""
        if not data_dir.is_dir():
            raise DataError(f"Data directory not found: {data_dir}")

    @staticmethod
    def sanitize_path_component(component: str, component_name: str) -> str:
        """Reject path components that could escape the data directory."""
        if ".." in component or not _SAFE_COMPONENT.match(component):
            raise ValidationError(
                f"Invalid {component_name}: '{component}'. "
                "Only alphanumeric, underscore, dash, and dot are allowed.",
                field=component_name,
            )
        return component

    @staticmethod
    def validate_path_safety(path: Path, data_dir: Path) -> None:
        """Raise ValidationError if ``path`` resolves outside ``data_dir``."""
        if not path.resolve().is_relative_to(data_dir.resolve()):
            raise ValidationError("Path traversal attempt detected")

    @staticmethod
    def get_available_symbols(data_dir: Path) -> list[str]:
        """Symbols with a directory under ``data_dir``."""
        if not data_dir.is_dir():
            return []
        return sorted(path.name for path in data_dir.iterdir() if path.is_dir())

    @staticmethod
    def get_available_intervals(data_dir: Path, symbol: str) -> list[str]:
        """Intervals stored as ``<interval>.csv`` for ``symbol``."""
        symbol_dir = data_dir / symbol
        if not symbol_dir.is_dir():
            return []
        return sorted(path.stem for path in symbol_dir.glob("*.csv"))

    @staticmethod
    def filter_by_date_range(
        df: pd.DataFrame, start_date: datetime, end_date: datetime
    ) -> pd.DataFrame:
        """Keep rows with ``start_date <= timestamp <= end_date``, sorted by timestamp."""
        if df.empty:
            return df

        start_ts = int(start_date.timestamp() * 1000)
        end_ts = int(end_date.timestamp() * 1000)
        mask = (df["timestamp"] >= start_ts) & (df["timestamp"] <= end_ts)
        return df[mask].sort_values("timestamp").reset_index(drop=True)

    @staticmethod
    def frame_to_candles(df: pd.DataFrame) -> list[Candle]:
        """Convert an OHLCV frame with millisecond timestamps to Candles."""
        return [
            Candle(
                timestamp=datetime.fromtimestamp(row.timestamp / 1000, tz=UTC),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
            )
            for row in df[OHLCV_COLUMNS].itertuples(index=False)
        ]

    @staticmethod
    def candles_to_frame(candles: list[Candle]) -> pd.DataFrame:
        """Convert Candles to an OHLCV frame with millisecond timestamps."""
        return pd.DataFrame(
            [
                {
                    "timestamp": int(candle.timestamp.timestamp() * 1000),
                    "open": candle.open,
                    "high": candle.high,
                    "low": candle.low,
                    "close": candle.close,
                    "volume": candle.volume,
                }
                for candle in candles
            ],
            columns=OHLCV_COLUMNS,
        )
