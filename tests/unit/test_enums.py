"""
Unit tests for enum types.
Testing all enum methods and properties.
"""

from datetime import timedelta

import pytest

from src.core.enums import (
    RunMode,
    RunStatus,
    SignalDirection,
    Timeframe,
    TradeReason,
    TradeSide,
)


class TestTradeSideEnum:
    """Tests for TradeSide enum."""

    def test_should_have_correct_values(self) -> None:
        """Test that TradeSide enum has correct values."""
        assert TradeSide.BUY.value == "buy"
        assert TradeSide.SELL.value == "sell"

    def test_should_identify_side(self) -> None:
        """Test is_buy and is_sell properties."""
        assert TradeSide.BUY.is_buy
        assert not TradeSide.BUY.is_sell
        assert TradeSide.SELL.is_sell
        assert not TradeSide.SELL.is_buy


class TestTradeReasonEnum:
    """Tests for TradeReason enum."""

    def test_should_have_correct_values(self) -> None:
        """Test that TradeReason enum has correct values."""
        assert TradeReason.AI_SIGNAL.value == "ai_signal"
        assert TradeReason.STOP_LOSS.value == "stop_loss"
        assert TradeReason.TAKE_PROFIT.value == "take_profit"
        assert TradeReason.MANUAL.value == "manual"


class TestRunStatusEnum:
    """Tests for RunStatus enum."""

    def test_should_mark_terminal_states(self) -> None:
        """Test is_terminal property."""
        assert RunStatus.COMPLETED.is_terminal
        assert RunStatus.FAILED.is_terminal
        assert RunStatus.CANCELLED.is_terminal
        assert not RunStatus.IDLE.is_terminal
        assert not RunStatus.RUNNING.is_terminal

    def test_should_allow_only_forward_transitions(self) -> None:
        """Test the IDLE -> RUNNING -> terminal state machine."""
        assert RunStatus.IDLE.can_transition_to(RunStatus.RUNNING)
        assert RunStatus.IDLE.can_transition_to(RunStatus.FAILED)
        assert RunStatus.RUNNING.can_transition_to(RunStatus.COMPLETED)
        assert RunStatus.RUNNING.can_transition_to(RunStatus.CANCELLED)

        assert not RunStatus.IDLE.can_transition_to(RunStatus.COMPLETED)
        assert not RunStatus.COMPLETED.can_transition_to(RunStatus.RUNNING)
        assert not RunStatus.CANCELLED.can_transition_to(RunStatus.FAILED)

    def test_should_have_run_modes(self) -> None:
        """Test RunMode values."""
        assert RunMode("quick") == RunMode.QUICK
        assert RunMode("full") == RunMode.FULL


class TestSignalDirectionEnum:
    """Tests for SignalDirection enum."""

    def test_should_classify_price_change_with_band(self) -> None:
        """Test from_price_change with the +/-0.5% band."""
        assert SignalDirection.from_price_change(0.6, 0.5) == SignalDirection.UP
        assert SignalDirection.from_price_change(-0.6, 0.5) == SignalDirection.DOWN
        assert SignalDirection.from_price_change(0.5, 0.5) == SignalDirection.HOLD
        assert SignalDirection.from_price_change(-0.5, 0.5) == SignalDirection.HOLD
        assert SignalDirection.from_price_change(0.0, 0.5) == SignalDirection.HOLD

    def test_should_identify_entry_and_exit(self) -> None:
        """Test is_entry and is_exit properties."""
        assert SignalDirection.UP.is_entry
        assert SignalDirection.DOWN.is_exit
        assert not SignalDirection.HOLD.is_entry
        assert not SignalDirection.HOLD.is_exit


class TestTimeframeEnum:
    """Tests for Timeframe enum."""

    def test_should_convert_to_seconds(self) -> None:
        """Test to_seconds for every interval."""
        assert Timeframe.to_seconds(Timeframe.H1) == 3600
        assert Timeframe.to_seconds(Timeframe.H4) == 14400
        assert Timeframe.to_seconds(Timeframe.D1) == 86400

    def test_should_convert_from_string_case_insensitive(self) -> None:
        """Test from_string method with various cases."""
        assert Timeframe.from_string("1h") == Timeframe.H1
        assert Timeframe.from_string("4H") == Timeframe.H4
        assert Timeframe.from_string("1D") == Timeframe.D1

    def test_should_raise_error_for_unsupported_timeframe(self) -> None:
        """Test that from_string rejects intervals the engine cannot serve."""
        with pytest.raises(ValueError, match="Unsupported timeframe"):
            Timeframe.from_string("5m")

    def test_should_expose_duration_and_pandas_freq(self) -> None:
        """Test duration and pandas_freq properties."""
        assert Timeframe.H4.duration == timedelta(hours=4)
        assert Timeframe.D1.pandas_freq == "1D"
