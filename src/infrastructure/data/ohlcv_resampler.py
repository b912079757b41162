"""
OHLCV data resampling module.

Aggregates fine candles into a coarser interval.
"""

import pandas as pd
from loguru import logger

from src.core.enums import Timeframe
from src.core.exceptions.backtest import DataError

from .ohlcv_validator import OHLCV_COLUMNS, OHLCVValidator

_AGGREGATIONS = {
    "open": "first",
    "high": "max",
    "low": "min",
    "close": "last",
    "volume": "sum",
}


class OHLCVResampler:
    """Resamples millisecond-timestamped OHLCV frames with left-labelled buckets."""

    def __init__(self) -> None:
        self._validator = OHLCVValidator()

    def resample(self, data: pd.DataFrame, timeframe: Timeframe) -> pd.DataFrame:
        """
        Resample ``data`` to ``timeframe``.

        Buckets are aligned to UTC midnight and labelled with their start.
        Empty buckets are dropped.

        Raises:
            DataError: If resampling fails
        """
        if data.empty:
            return data

        try:
            indexed = data.set_index(pd.to_datetime(data["timestamp"], unit="ms", utc=True))
            resampled = (
                indexed[list(_AGGREGATIONS)]
                .resample(timeframe.pandas_freq, label="left", closed="left")
                .agg(_AGGREGATIONS)
                .dropna(subset=["open", "close"])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataError(f"Failed to resample data to {timeframe}: {e}") from e

        resampled["timestamp"] = resampled.index.as_unit("ms").asi8
        result = resampled.reset_index(drop=True)[OHLCV_COLUMNS]

        self._validator.validate(result, f"resampled {timeframe}")
        logger.debug(f"Resampled {len(data)} -> {len(result)} rows to {timeframe}")
        return result
