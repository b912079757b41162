"""
Unit tests for OHLCV validation, cleaning and resampling.
"""

from datetime import UTC, datetime

import numpy as np
import pandas as pd
import pytest

from src.core.enums import Timeframe
from src.core.exceptions.backtest import DataError
from src.infrastructure.data import OHLCVCleaner, OHLCVResampler, OHLCVValidator

START_MS = int(datetime(2024, 1, 1, tzinfo=UTC).timestamp() * 1000)
HOUR_MS = 3_600_000
T1 = START_MS + HOUR_MS
T2 = START_MS + 2 * HOUR_MS


def hourly_frame(hours: int) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "timestamp": [START_MS + i * HOUR_MS for i in range(hours)],
            "open": [100.0 + i for i in range(hours)],
            "high": [101.0 + i for i in range(hours)],
            "low": [99.0 + i for i in range(hours)],
            "close": [100.5 + i for i in range(hours)],
            "volume": [1.0] * hours,
        }
    )


class TestOHLCVValidator:
    """Test suite for OHLCVValidator."""

    @pytest.fixture
    def validator(self) -> OHLCVValidator:
        return OHLCVValidator()

    def test_should_accept_valid_and_empty_frames(self, validator: OHLCVValidator) -> None:
        """Test frames that pass validation."""
        validator.validate(hourly_frame(5))
        validator.validate(pd.DataFrame())

    def test_should_reject_missing_columns(self, validator: OHLCVValidator) -> None:
        """Test required columns."""
        with pytest.raises(DataError, match="missing columns"):
            validator.validate(hourly_frame(3).drop(columns=["volume"]))

    def test_should_reject_duplicate_timestamps(self, validator: OHLCVValidator) -> None:
        """Test duplicate detection."""
        frame = hourly_frame(3)
        frame.loc[2, "timestamp"] = frame.loc[1, "timestamp"]

        with pytest.raises(DataError, match="duplicate timestamps"):
            validator.validate(frame)

    def test_should_reject_non_positive_prices(self, validator: OHLCVValidator) -> None:
        """Test price positivity."""
        frame = hourly_frame(3)
        frame.loc[0, "low"] = 0.0

        with pytest.raises(DataError, match="prices must be positive"):
            validator.validate(frame)

    def test_should_reject_broken_envelope(self, validator: OHLCVValidator) -> None:
        """Test high below close."""
        frame = hourly_frame(3)
        frame.loc[1, "high"] = 100.0

        with pytest.raises(DataError, match="invalid OHLC relationships"):
            validator.validate(frame)

    def test_should_count_gaps(self, validator: OHLCVValidator) -> None:
        """Test missing candle detection."""
        frame = hourly_frame(4).drop(index=2)

        assert validator.count_gaps(frame, Timeframe.H1) == 1
        assert validator.count_gaps(hourly_frame(4), Timeframe.H1) == 0


class TestOHLCVCleaner:
    """Test suite for OHLCVCleaner."""

    @pytest.fixture
    def cleaner(self) -> OHLCVCleaner:
        return OHLCVCleaner()

    def test_should_sort_deduplicate_and_repair(self, cleaner: OHLCVCleaner) -> None:
        """Test ordering, duplicate removal, volume fill and envelope repair."""
        # Arrange
        raw = pd.DataFrame(
            {
                "timestamp": [T2, START_MS, T1, T1],
                "open": [102.0, 100.0, 101.0, 999.0],
                "high": [103.0, 101.0, 100.0, 999.0],
                "low": [101.0, 99.0, 100.0, 999.0],
                "close": [102.5, 100.5, 101.5, 999.0],
                "volume": [1.0, 1.0, np.nan, 1.0],
            }
        )

        # Act
        cleaned = cleaner.clean(raw, source="test.csv")

        # Assert
        assert cleaned["timestamp"].tolist() == [START_MS, T1, T2]
        repaired = cleaned.iloc[1]
        assert repaired["open"] == 101.0
        assert repaired["high"] == 101.5
        assert repaired["low"] == 100.0
        assert repaired["volume"] == 0.0

    def test_should_forward_fill_missing_prices(self, cleaner: OHLCVCleaner) -> None:
        """Test that gaps inside the data take the previous price."""
        raw = hourly_frame(3)
        raw.loc[1, "close"] = np.nan

        cleaned = cleaner.clean(raw)

        assert cleaned.loc[1, "close"] == 100.5

    def test_should_drop_rows_without_usable_prices(self, cleaner: OHLCVCleaner) -> None:
        """Test leading NaN and non-positive prices."""
        raw = hourly_frame(4)
        raw.loc[0, "open"] = np.nan
        raw.loc[2, "low"] = -1.0

        cleaned = cleaner.clean(raw)

        assert len(cleaned) == 2
        assert cleaned["timestamp"].tolist() == [START_MS + HOUR_MS, START_MS + 3 * HOUR_MS]

    def test_should_coerce_text_values(self, cleaner: OHLCVCleaner) -> None:
        """Test that numeric strings are parsed and bad timestamps dropped."""
        raw = hourly_frame(3).astype(str)
        raw.loc[2, "timestamp"] = "not-a-time"

        cleaned = cleaner.clean(raw)

        assert len(cleaned) == 2
        assert cleaned["close"].tolist() == [100.5, 101.5]

    def test_should_reject_missing_columns(self, cleaner: OHLCVCleaner) -> None:
        """Test structural errors."""
        with pytest.raises(DataError):
            cleaner.clean(hourly_frame(2).drop(columns=["close"]))


class TestOHLCVResampler:
    """Test suite for OHLCVResampler."""

    @pytest.fixture
    def resampler(self) -> OHLCVResampler:
        return OHLCVResampler()

    def test_should_resample_to_daily(self, resampler: OHLCVResampler) -> None:
        """Test daily aggregation aligned to midnight."""
        result = resampler.resample(hourly_frame(48), Timeframe.D1)

        assert len(result) == 2
        first = result.iloc[0]
        assert first["timestamp"] == START_MS
        assert first["open"] == 100.0
        assert first["high"] == 124.0
        assert first["low"] == 99.0
        assert first["close"] == 123.5
        assert first["volume"] == 24.0

    def test_should_skip_empty_buckets(self, resampler: OHLCVResampler) -> None:
        """Test that missing hours do not create empty candles."""
        frame = hourly_frame(12).drop(index=[4, 5, 6, 7]).reset_index(drop=True)

        result = resampler.resample(frame, Timeframe.H4)

        assert result["timestamp"].tolist() == [START_MS, START_MS + 8 * HOUR_MS]

    def test_should_return_empty_frame_unchanged(self, resampler: OHLCVResampler) -> None:
        """Test empty input."""
        empty = pd.DataFrame(columns=["timestamp", "open", "high", "low", "close", "volume"])

        assert resampler.resample(empty, Timeframe.H4).empty
