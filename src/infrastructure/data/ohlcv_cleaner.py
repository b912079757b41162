"""
OHLCV data cleaning module.

Normalizes raw CSV rows into a frame the validator accepts.
"""

import pandas as pd
from loguru import logger

from src.core.exceptions.backtest import DataError

from .ohlcv_validator import OHLCV_COLUMNS, PRICE_COLUMNS, OHLCVValidator


class OHLCVCleaner:
    """
    OHLCV data cleaner.

    Steps, in order:
    - coerce columns to numbers and drop rows without a timestamp
    - drop duplicate timestamps and sort chronologically
    - forward fill missing prices, zero-fill missing volume
    - drop rows whose prices are still missing or non-positive
    - widen high/low so they contain open and close
    """

    def __init__(self) -> None:
        self._validator = OHLCVValidator()

    def clean(self, data: pd.DataFrame, source: str = "data") -> pd.DataFrame:
        """
        Clean an OHLCV frame.

        Returns:
            A new frame with exactly the OHLCV columns

        Raises:
            DataError: If required columns are missing or the result is invalid
        """
        if data.empty:
            return pd.DataFrame(columns=OHLCV_COLUMNS)

        missing_columns = [col for col in OHLCV_COLUMNS if col not in data.columns]
        if missing_columns:
            raise DataError(f"{source} is missing columns: {missing_columns}")

        cleaned = data[OHLCV_COLUMNS].apply(pd.to_numeric, errors="coerce")
        cleaned = cleaned.dropna(subset=["timestamp"])
        cleaned["timestamp"] = cleaned["timestamp"].astype("int64")

        duplicates = cleaned["timestamp"].duplicated(keep="first")
        if duplicates.any():
            logger.warning(f"{source}: removing {int(duplicates.sum())} duplicate timestamps")
            cleaned = cleaned[~duplicates]
        cleaned = cleaned.sort_values("timestamp").reset_index(drop=True)

        if cleaned[PRICE_COLUMNS].isna().any().any():
            logger.warning(f"{source}: forward filling missing prices")
            cleaned[PRICE_COLUMNS] = cleaned[PRICE_COLUMNS].ffill()
        cleaned["volume"] = cleaned["volume"].fillna(0).clip(lower=0)

        unusable = cleaned[PRICE_COLUMNS].isna().any(axis=1) | (
            cleaned[PRICE_COLUMNS] <= 0
        ).any(axis=1)
        if unusable.any():
            logger.warning(f"{source}: dropping {int(unusable.sum())} rows without valid prices")
            cleaned = cleaned[~unusable].reset_index(drop=True)

        cleaned["high"] = cleaned[PRICE_COLUMNS].max(axis=1)
        cleaned["low"] = cleaned[PRICE_COLUMNS].min(axis=1)

        self._validator.validate(cleaned, source)
        if len(cleaned) != len(data):
            logger.info(f"{source}: cleaned {len(data)} -> {len(cleaned)} rows")
        return cleaned
