"""
Unit tests for InMemoryResultSink.
"""

from datetime import UTC, datetime

import pytest

from src.core.models.backtest import StrategyParameters
from src.core.models.trading_run import TradingRun
from src.infrastructure.results import InMemoryResultSink


def make_run() -> TradingRun:
    return TradingRun(
        symbol="BTC",
        session_start=datetime(2024, 1, 1, tzinfo=UTC),
        starting_capital=1000.0,
        parameters=StrategyParameters(),
    )


class TestInMemoryResultSink:
    """Test suite for the in-memory result store."""

    def test_should_store_and_return_runs(self) -> None:
        """Test persist and get."""
        sink = InMemoryResultSink()
        run = make_run()

        sink.persist(run, [])

        stored = sink.get(run.id)
        assert stored is not None
        assert stored[0] is run
        assert stored[1] == []
        assert sink.get("unknown") is None

    def test_should_evict_least_recently_used(self) -> None:
        """Test capacity handling."""
        sink = InMemoryResultSink(capacity=2)
        first, second, third = make_run(), make_run(), make_run()

        sink.persist(first, [])
        sink.persist(second, [])
        sink.persist(third, [])

        assert len(sink) == 2
        assert sink.get(first.id) is None
        assert sink.get(third.id) is not None

    def test_should_reject_invalid_capacity(self) -> None:
        """Test constructor validation."""
        with pytest.raises(ValueError):
            InMemoryResultSink(capacity=0)
