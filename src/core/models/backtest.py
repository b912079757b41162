"""
Backtest request, progress and result models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.core.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_MAX_OPEN_POSITIONS,
    DEFAULT_RISK_PER_TRADE,
    DEFAULT_SIGNAL_LOOKBACK,
    DEFAULT_STOP_LOSS_PERCENT,
    DEFAULT_TAKE_PROFIT_PERCENT,
)
from src.core.enums import RunStatus, Timeframe

from .performance import PerformanceMetrics
from .timeline import TimelinePoint
from .trade import Trade
from .trading_run import TradingRun


@dataclass(frozen=True)
class StrategyParameters:
    """Knobs of the AI-signal strategy.

    Percentages are in percent (5.0 means 5%). Values are checked by the
    request validator, not here, so invalid input can be reported per field.
    """

    stop_loss_percent: float = DEFAULT_STOP_LOSS_PERCENT
    take_profit_percent: float = DEFAULT_TAKE_PROFIT_PERCENT
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    max_open_positions: int = DEFAULT_MAX_OPEN_POSITIONS
    risk_per_trade: float = DEFAULT_RISK_PER_TRADE
    interval: str = Timeframe.H1.value
    signal_lookback: int = DEFAULT_SIGNAL_LOOKBACK
    exit_on_bearish_signal: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert parameters to dictionary."""
        return {
            "stop_loss_percent": self.stop_loss_percent,
            "take_profit_percent": self.take_profit_percent,
            "confidence_threshold": self.confidence_threshold,
            "max_open_positions": self.max_open_positions,
            "risk_per_trade": self.risk_per_trade,
            "interval": self.interval,
            "signal_lookback": self.signal_lookback,
            "exit_on_bearish_signal": self.exit_on_bearish_signal,
        }


@dataclass
class BacktestRequest:
    """Raw backtest request as received from a caller.

    ``start`` and ``end`` accept datetimes or ISO-8601 strings.
    """

    symbol: str
    start: datetime | str
    end: datetime | str
    starting_capital: float
    parameters: StrategyParameters = field(default_factory=StrategyParameters)


@dataclass(frozen=True)
class BacktestProgress:
    """Snapshot reported while a full backtest is running."""

    run_id: str
    processed: int
    total: int
    current_time: datetime | None
    total_trades: int
    portfolio_value: float
    status: RunStatus = RunStatus.RUNNING

    @property
    def percent(self) -> float:
        """Share of candles processed, in percent."""
        if self.total <= 0:
            return 0.0
        return round(self.processed / self.total * 100, 2)

    def to_dict(self) -> dict[str, Any]:
        """Convert progress to dictionary."""
        return {
            "run_id": self.run_id,
            "processed": self.processed,
            "total": self.total,
            "percent": self.percent,
            "current_time": self.current_time.isoformat() if self.current_time else None,
            "total_trades": self.total_trades,
            "portfolio_value": self.portfolio_value,
            "status": self.status.value,
        }


@dataclass
class BacktestResult:
    """Everything a finished, cancelled or failed run produces."""

    run: TradingRun
    trades: list[Trade]
    timeline: list[TimelinePoint]
    performance: PerformanceMetrics | None
    status: RunStatus
    error_message: str | None = None
    benchmark_return: float | None = None

    def is_profitable(self) -> bool:
        """Check if the backtest was profitable."""
        return self.performance is not None and self.performance.total_return > 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert results to dictionary."""
        return {
            "run": self.run.to_dict(),
            "status": self.status.value,
            "error_message": self.error_message,
            "performance": self.performance.to_dict() if self.performance else None,
            "benchmark_return": self.benchmark_return,
            "trades": [trade.to_dict() for trade in self.trades],
            "timeline": [point.to_dict() for point in self.timeline],
        }
