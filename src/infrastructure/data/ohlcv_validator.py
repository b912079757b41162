"""
OHLCV data validation module.

Checks a candle frame before it is turned into Candle objects: required
columns, numeric types, positive prices and a consistent OHLC envelope.
"""

import pandas as pd
from loguru import logger

from src.core.enums import Timeframe
from src.core.exceptions.backtest import DataError

OHLCV_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]
PRICE_COLUMNS = ["open", "high", "low", "close"]


class OHLCVValidator:
    """
    OHLCV frame validator.

    Structural problems raise DataError; anomalies that do not make the
    data unusable, such as gaps or extreme ranges, are only logged.
    """

    def validate(self, data: pd.DataFrame, source: str = "data") -> None:
        """
        Validate an OHLCV frame.

        Args:
            data: Frame with millisecond timestamps and OHLCV columns
            source: Name used in error messages, usually the file name

        Raises:
            DataError: If the frame cannot be used as market data
        """
        if data.empty:
            return

        missing_columns = [col for col in OHLCV_COLUMNS if col not in data.columns]
        if missing_columns:
            raise DataError(f"{source} is missing columns: {missing_columns}")

        for col in OHLCV_COLUMNS:
            if not pd.api.types.is_numeric_dtype(data[col]):
                raise DataError(f"{source}: column {col} must be numeric")
            if data[col].isna().any():
                raise DataError(f"{source}: column {col} contains NaN values")

        if data["timestamp"].duplicated().any():
            raise DataError(f"{source}: duplicate timestamps found")

        if (data[PRICE_COLUMNS] <= 0).any().any():
            raise DataError(f"{source}: prices must be positive")
        if (data["volume"] < 0).any():
            raise DataError(f"{source}: volume must be non-negative")

        broken_envelope = (data["high"] < data[["open", "close", "low"]].max(axis=1)) | (
            data["low"] > data[["open", "close", "high"]].min(axis=1)
        )
        if broken_envelope.any():
            raise DataError(
                f"{source}: invalid OHLC relationships in {int(broken_envelope.sum())} rows"
            )

        extreme = (data["high"] - data["low"]) / data["low"] > 0.5
        if extreme.any():
            logger.warning(f"{source}: {int(extreme.sum())} candles with a range above 50%")

    def count_gaps(self, data: pd.DataFrame, timeframe: Timeframe) -> int:
        """Number of missing candles between the first and last timestamp."""
        if len(data) < 2:
            return 0
        step_ms = Timeframe.to_seconds(timeframe) * 1000
        span = int(data["timestamp"].max() - data["timestamp"].min())
        expected = span // step_ms + 1
        return max(expected - data["timestamp"].nunique(), 0)
