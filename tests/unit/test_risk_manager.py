"""
Unit tests for RiskManager.
"""

from datetime import UTC, datetime

import pytest

from src.core.enums import TradeReason
from src.core.exceptions.backtest import PositionLimitError, PositionNotFoundError
from src.core.models.market import Candle
from src.engine.risk_manager import RiskManager

START = datetime(2024, 1, 1, tzinfo=UTC)


def candle(open_: float, high: float, low: float, close: float) -> Candle:
    return Candle(START, open_, high, low, close, 1.0)


class TestRiskManager:
    """Test suite for stop-loss and take-profit handling."""

    @pytest.fixture
    def manager(self) -> RiskManager:
        return RiskManager(stop_loss_percent=5.0, take_profit_percent=10.0, max_open_positions=2)

    def test_should_open_positions_with_levels(self, manager: RiskManager) -> None:
        """Test that opened positions get fixed exit levels."""
        position = manager.open_position("BTC", 100.0, 1.0, START, 0.15, entry_confidence=0.8)

        assert position.stop_loss_price == pytest.approx(95.0)
        assert position.take_profit_price == pytest.approx(110.0)
        assert position.entry_confidence == 0.8
        assert manager.open_count == 1

    def test_should_enforce_position_cap(self, manager: RiskManager) -> None:
        """Test PositionLimitError at the cap."""
        manager.open_position("BTC", 100.0, 1.0, START, 0.15)
        manager.open_position("BTC", 101.0, 1.0, START, 0.15)

        assert not manager.can_open()
        with pytest.raises(PositionLimitError):
            manager.open_position("BTC", 102.0, 1.0, START, 0.15)

    def test_should_close_positions(self, manager: RiskManager) -> None:
        """Test closing known and unknown positions."""
        position = manager.open_position("BTC", 100.0, 1.0, START, 0.15)

        assert manager.close_position(position.id) is position
        assert manager.open_count == 0
        with pytest.raises(PositionNotFoundError):
            manager.close_position(position.id)

    def test_should_evaluate_price_ticks(self, manager: RiskManager) -> None:
        """Test evaluate at and around the levels."""
        position = manager.open_position("BTC", 100.0, 1.0, START, 0.15)

        assert manager.evaluate(position, 95.0) == TradeReason.STOP_LOSS
        assert manager.evaluate(position, 96.0) is None
        assert manager.evaluate(position, 110.0) == TradeReason.TAKE_PROFIT

    def test_should_fill_stop_loss_at_level(self, manager: RiskManager) -> None:
        """Test a stop touched inside the candle range."""
        position = manager.open_position("BTC", 100.0, 1.0, START, 0.15)

        decision = manager.evaluate_candle(position, candle(100.0, 101.0, 94.0, 96.0))

        assert decision is not None
        assert decision.reason == TradeReason.STOP_LOSS
        assert decision.price == pytest.approx(95.0)

    def test_should_prefer_stop_loss_when_both_levels_hit(self, manager: RiskManager) -> None:
        """Test the stop-loss-first tie break."""
        position = manager.open_position("BTC", 100.0, 1.0, START, 0.15)

        decision = manager.evaluate_candle(position, candle(100.0, 115.0, 90.0, 112.0))

        assert decision is not None
        assert decision.reason == TradeReason.STOP_LOSS

    def test_should_fill_gaps_at_open(self, manager: RiskManager) -> None:
        """Test fills at the open when the candle gaps through a level."""
        position = manager.open_position("BTC", 100.0, 1.0, START, 0.15)

        stop = manager.evaluate_candle(position, candle(90.0, 92.0, 88.0, 91.0))
        target = manager.evaluate_candle(position, candle(112.0, 115.0, 111.0, 113.0))

        assert stop is not None and stop.price == 90.0
        assert target is not None
        assert target.reason == TradeReason.TAKE_PROFIT
        assert target.price == 112.0

    def test_should_skip_disabled_levels(self) -> None:
        """Test that 0% levels never trigger."""
        manager = RiskManager(stop_loss_percent=0.0, take_profit_percent=0.0, max_open_positions=1)
        manager.open_position("BTC", 100.0, 1.0, START, 0.15)

        assert manager.check_exits(candle(100.0, 500.0, 1.0, 100.0)) == []

    def test_should_check_every_open_position(self, manager: RiskManager) -> None:
        """Test check_exits across positions with different levels."""
        low_entry = manager.open_position("BTC", 100.0, 1.0, START, 0.15)
        manager.open_position("BTC", 105.0, 1.0, START, 0.15)

        decisions = manager.check_exits(candle(111.0, 112.0, 110.0, 111.0))

        assert [d.position.id for d in decisions] == [low_entry.id]
        assert decisions[0].reason == TradeReason.TAKE_PROFIT

    def test_should_mark_positions_to_market(self, manager: RiskManager) -> None:
        """Test aggregate market value."""
        manager.open_position("BTC", 100.0, 1.5, START, 0.15)
        manager.open_position("BTC", 120.0, 0.5, START, 0.15)

        assert manager.market_value(110.0) == pytest.approx(220.0)
        assert RiskManager(5.0, 10.0, 1).market_value(110.0) == 0.0
