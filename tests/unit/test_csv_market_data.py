"""
Unit tests for CSVMarketDataSource.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pandas as pd
import pytest

from src.core.exceptions.backtest import DataError, DataUnavailableError, ValidationError
from src.infrastructure.data import CSVMarketDataSource

START = datetime(2024, 1, 1, tzinfo=UTC)
START_MS = int(START.timestamp() * 1000)
HOUR_MS = 3_600_000


def write_hourly_csv(path: Path, hours: int = 48) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(
        {
            "timestamp": [START_MS + i * HOUR_MS for i in range(hours)],
            "open": [100.0 + i for i in range(hours)],
            "high": [101.0 + i for i in range(hours)],
            "low": [99.0 + i for i in range(hours)],
            "close": [100.5 + i for i in range(hours)],
            "volume": [1.0] * hours,
        }
    ).to_csv(path, index=False)


class TestCSVMarketDataSource:
    """Test suite for the CSV-backed data source."""

    @pytest.fixture
    def data_dir(self, tmp_path: Path) -> Path:
        write_hourly_csv(tmp_path / "BTC" / "1h.csv")
        write_hourly_csv(tmp_path / "ETH" / "1h.csv", hours=4)
        return tmp_path

    @pytest.fixture
    def source(self, data_dir: Path) -> CSVMarketDataSource:
        return CSVMarketDataSource(data_dir)

    def test_should_load_candles_in_window(self, source: CSVMarketDataSource) -> None:
        """Test inclusive window filtering and symbol normalization."""
        # Act
        candles = source.get_candles("btc", START, START + timedelta(hours=5), "1h")

        # Assert
        assert len(candles) == 6
        assert candles[0].timestamp == START
        assert candles[0].open == 100.0
        assert candles[-1].timestamp == START + timedelta(hours=5)
        assert candles[-1].close == 105.5

    def test_should_resample_missing_intervals(self, source: CSVMarketDataSource) -> None:
        """Test 4h candles built from the 1h file."""
        candles = source.get_candles("BTC", START, START + timedelta(days=2), "4h")

        assert len(candles) == 12
        first = candles[0]
        assert first.timestamp == START
        assert (first.open, first.high, first.low, first.close) == (100.0, 104.0, 99.0, 103.5)
        assert first.volume == 4.0
        assert candles[1].timestamp == START + timedelta(hours=4)

    def test_should_prefer_native_interval_file(self, data_dir: Path) -> None:
        """Test that an existing interval file is used instead of resampling."""
        write_hourly_csv(data_dir / "BTC" / "4h.csv", hours=3)
        source = CSVMarketDataSource(data_dir)

        candles = source.get_candles("BTC", START, START + timedelta(days=2), "4h")

        assert len(candles) == 3

    def test_should_cache_frames(self, source: CSVMarketDataSource) -> None:
        """Test cache population and clearing."""
        source.get_candles("BTC", START, START + timedelta(hours=1), "1h")
        source.get_candles("BTC", START, START + timedelta(hours=2), "1h")
        assert source.get_cache_info()["cache_size"] == 1

        source.get_candles("BTC", START, START + timedelta(days=1), "1d")
        assert source.get_cache_info()["cache_size"] == 2

        source.clear_cache()
        assert source.get_cache_info() == {"cache_size": 0, "max_cache_size": 32}

    def test_should_raise_when_symbol_missing(self, source: CSVMarketDataSource) -> None:
        """Test a symbol without a data folder."""
        with pytest.raises(DataUnavailableError) as exc_info:
            source.get_candles("DOGE", START, START + timedelta(hours=5), "1h")

        assert exc_info.value.symbol == "DOGE"

    def test_should_raise_when_window_empty(self, source: CSVMarketDataSource) -> None:
        """Test a window outside the stored data."""
        with pytest.raises(DataUnavailableError):
            source.get_candles(
                "BTC", datetime(2025, 1, 1, tzinfo=UTC), datetime(2025, 1, 2, tzinfo=UTC), "1h"
            )

    @pytest.mark.parametrize("symbol", ["../etc", "BTC/../../x", "a" * 51])
    def test_should_reject_unsafe_symbols(
        self, source: CSVMarketDataSource, symbol: str
    ) -> None:
        """Test path traversal protection."""
        with pytest.raises(ValidationError) as exc_info:
            source.get_candles(symbol, START, START + timedelta(hours=1), "1h")

        assert exc_info.value.field == "symbol"

    def test_should_reject_unsupported_interval(self, source: CSVMarketDataSource) -> None:
        """Test that unknown intervals are validation errors."""
        with pytest.raises(ValidationError) as exc_info:
            source.get_candles("BTC", START, START + timedelta(hours=1), "5m")

        assert exc_info.value.field == "interval"

    def test_should_raise_data_error_for_corrupt_file(self, data_dir: Path) -> None:
        """Test a file with non-numeric prices."""
        corrupt = data_dir / "BAD" / "1h.csv"
        corrupt.parent.mkdir()
        corrupt.write_text("timestamp,open,high,low,close,volume\n1704067200000,abc,1,1,1,1\n")
        source = CSVMarketDataSource(data_dir)

        with pytest.raises(DataError):
            source.get_candles("BAD", START, START + timedelta(hours=1), "1h")

    def test_should_treat_empty_file_as_unavailable(self, data_dir: Path) -> None:
        """Test an empty CSV file."""
        empty = data_dir / "NIL" / "1h.csv"
        empty.parent.mkdir()
        empty.write_text("")
        source = CSVMarketDataSource(data_dir)

        with pytest.raises(DataUnavailableError):
            source.get_candles("NIL", START, START + timedelta(hours=1), "1h")

    def test_should_require_existing_directory(self, tmp_path: Path) -> None:
        """Test construction with a missing directory."""
        with pytest.raises(DataError, match="Data directory not found"):
            CSVMarketDataSource(tmp_path / "missing")

    def test_should_list_symbols_and_intervals(self, source: CSVMarketDataSource) -> None:
        """Test discovery helpers."""
        assert source.get_available_symbols() == ["BTC", "ETH"]
        assert source.get_available_intervals("btc") == ["1h"]
        assert source.get_available_intervals("SOL") == []
