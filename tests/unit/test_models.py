"""
Unit tests for domain models.
"""

from datetime import UTC, datetime

import pytest

from src.core.enums import RunStatus, SignalDirection, TradeReason, TradeSide
from src.core.exceptions.backtest import RunStateError, ValidationError
from src.core.models.backtest import BacktestProgress, StrategyParameters
from src.core.models.market import Candle, Signal
from src.core.models.performance import PerformanceMetrics
from src.core.models.position import Position
from src.core.models.trade import FeeSchedule, Trade
from src.core.models.trading_run import TradingRun

START = datetime(2024, 1, 1, tzinfo=UTC)


def make_trade(side: TradeSide = TradeSide.SELL, profit_loss: float | None = 10.0) -> Trade:
    return Trade(
        side=side,
        symbol="BTC",
        quantity=1.0,
        price=100.0,
        fee=0.1,
        total_value=100.0,
        net_value=99.9,
        portfolio_value_before=0.0,
        portfolio_value_after=99.9,
        profit_loss=profit_loss,
        reason=TradeReason.AI_SIGNAL,
        confidence=0.8,
        execution_time=START,
    )


class TestCandle:
    """Tests for the Candle model."""

    def test_should_create_valid_candle(self) -> None:
        """Test candle creation and serialization."""
        candle = Candle(START, 100.0, 110.0, 95.0, 105.0, 12.5)

        assert candle.to_dict()["timestamp"] == "2024-01-01T00:00:00+00:00"
        assert candle.to_dict()["close"] == 105.0

    def test_should_reject_invalid_candle(self) -> None:
        """Test non-positive prices, inverted range and negative volume."""
        with pytest.raises(ValidationError):
            Candle(START, 0.0, 110.0, 95.0, 105.0, 1.0)
        with pytest.raises(ValidationError):
            Candle(START, 100.0, 90.0, 95.0, 92.0, 1.0)
        with pytest.raises(ValidationError):
            Candle(START, 100.0, 110.0, 95.0, 105.0, -1.0)


class TestSignal:
    """Tests for the Signal model."""

    def test_should_compare_against_threshold(self) -> None:
        """Test that the threshold is inclusive."""
        signal = Signal(SignalDirection.UP, 0.7, 101.0)

        assert signal.meets_threshold(0.7)
        assert not signal.meets_threshold(0.71)

    def test_should_reject_out_of_range_confidence(self) -> None:
        """Test confidence bounds."""
        with pytest.raises(ValidationError):
            Signal(SignalDirection.UP, 1.2, 101.0)

    def test_should_build_hold_signal(self) -> None:
        """Test the zero-confidence hold factory."""
        signal = Signal.hold(100.0)

        assert signal.direction == SignalDirection.HOLD
        assert signal.confidence == 0.0
        assert signal.predicted_price == 100.0


class TestTrade:
    """Tests for the Trade model."""

    def test_should_mark_sells_as_completed(self) -> None:
        """Test is_completed for buys and sells."""
        assert make_trade().is_completed
        assert not make_trade(TradeSide.BUY, None).is_completed

    def test_should_reject_buy_with_profit_loss(self) -> None:
        """Test that buys never carry realised P/L."""
        with pytest.raises(ValidationError, match="Buy fills cannot carry profit/loss"):
            make_trade(TradeSide.BUY, 5.0)

    def test_should_serialize_enums_as_values(self) -> None:
        """Test to_dict output."""
        data = make_trade().to_dict()

        assert data["side"] == "sell"
        assert data["reason"] == "ai_signal"
        assert data["profit_loss"] == 10.0

    def test_should_be_immutable(self) -> None:
        """Test that trades are frozen."""
        trade = make_trade()

        with pytest.raises(AttributeError):
            trade.price = 200.0  # type: ignore[misc]


class TestFeeSchedule:
    """Tests for FeeSchedule."""

    def test_should_charge_taker_on_buys_and_maker_on_sells(self) -> None:
        """Test the rate picked per side."""
        schedule = FeeSchedule(maker_fee_percent=0.1, taker_fee_percent=0.15)

        assert schedule.fee_percent(TradeSide.BUY) == 0.15
        assert schedule.fee_percent(TradeSide.SELL) == 0.1

    def test_should_reject_inverted_fee_bounds(self) -> None:
        """Test minimum above maximum."""
        with pytest.raises(ValidationError):
            FeeSchedule(minimum_fee=10.0, maximum_fee=1.0)


class TestPosition:
    """Tests for the Position model."""

    def test_should_derive_exit_levels(self) -> None:
        """Test stop-loss and take-profit prices from percentages."""
        position = Position.open("BTC", 100.0, 2.0, START, 0.3, 5.0, 10.0)

        assert position.stop_loss_price == pytest.approx(95.0)
        assert position.take_profit_price == pytest.approx(110.0)

    def test_should_disable_zero_percent_levels(self) -> None:
        """Test that a 0% distance disables the exit."""
        position = Position.open("BTC", 100.0, 2.0, START, 0.3, 0.0, 0.0)

        assert position.stop_loss_price is None
        assert position.take_profit_price is None

    def test_should_value_position(self) -> None:
        """Test cost basis and mark-to-market."""
        position = Position.open("BTC", 100.0, 2.0, START, 0.3, 5.0, 10.0)

        assert position.cost_basis == pytest.approx(200.3)
        assert position.market_value(110.0) == pytest.approx(220.0)
        assert position.unrealized_profit_loss(110.0) == pytest.approx(19.7)

    def test_should_reject_invalid_position(self) -> None:
        """Test non-positive quantity."""
        with pytest.raises(ValidationError):
            Position.open("BTC", 100.0, 0.0, START, 0.3, 5.0, 10.0)


class TestTradingRun:
    """Tests for the TradingRun lifecycle."""

    @pytest.fixture
    def run(self) -> TradingRun:
        return TradingRun(
            symbol="BTC",
            session_start=START,
            starting_capital=10000.0,
            parameters=StrategyParameters(),
        )

    def test_should_count_trades_while_running(self, run: TradingRun) -> None:
        """Test total and winning trade counters."""
        run.start()

        run.record_trade(make_trade(TradeSide.BUY, None))
        run.record_trade(make_trade(profit_loss=25.0))
        run.record_trade(make_trade(profit_loss=-5.0))

        assert run.total_trades == 3
        assert run.winning_trades == 1

    def test_should_reject_trades_before_start(self, run: TradingRun) -> None:
        """Test that an idle run cannot record trades."""
        with pytest.raises(RunStateError):
            run.record_trade(make_trade())

    def test_should_finalize_exactly_once(self, run: TradingRun) -> None:
        """Test the finalize-once rule."""
        # Arrange
        run.start()
        metrics = PerformanceMetrics.empty()

        # Act
        run.finalize(RunStatus.COMPLETED, final_capital=10000.0, session_end=START, metrics=metrics)

        # Assert
        assert run.status == RunStatus.COMPLETED
        assert run.final_capital == 10000.0
        assert run.is_finalized
        with pytest.raises(RunStateError, match="already finalized"):
            run.finalize(RunStatus.CANCELLED, final_capital=1.0, session_end=START)

    def test_should_reject_non_terminal_finalize(self, run: TradingRun) -> None:
        """Test finalize with a non-terminal status."""
        run.start()

        with pytest.raises(RunStateError):
            run.finalize(RunStatus.RUNNING, final_capital=None, session_end=None)

    def test_should_fail_without_results(self, run: TradingRun) -> None:
        """Test fail() sets the error and leaves capital unset."""
        run.start()

        run.fail("no data")

        assert run.status == RunStatus.FAILED
        assert run.error_message == "no data"
        assert run.final_capital is None
        assert run.to_dict()["status"] == "failed"


class TestBacktestProgress:
    """Tests for BacktestProgress."""

    def test_should_compute_percent(self) -> None:
        """Test percent rounding and the empty case."""
        progress = BacktestProgress("run", 1, 3, START, 0, 10000.0)

        assert progress.percent == 33.33
        assert BacktestProgress("run", 0, 0, None, 0, 0.0).percent == 0.0
        assert progress.to_dict()["status"] == "running"
