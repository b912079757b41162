"""
Trading run model.

A TradingRun is the persisted summary of one simulation. The simulation
driver is its only writer: it starts the run, records every fill and
finalizes it exactly once.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from src.core.enums import RunStatus, SessionType
from src.core.exceptions.backtest import RunStateError

from .trade import Trade

if TYPE_CHECKING:
    from .backtest import StrategyParameters
    from .performance import PerformanceMetrics


@dataclass
class TradingRun:
    """Summary record of one backtest session."""

    symbol: str
    session_start: datetime
    starting_capital: float
    parameters: "StrategyParameters"
    session_type: SessionType = SessionType.BACKTEST
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    session_end: datetime | None = None
    final_capital: float | None = None
    total_trades: int = 0
    winning_trades: int = 0
    total_return: float = 0.0
    max_drawdown: float = 0.0
    win_rate: float = 0.0
    status: RunStatus = RunStatus.IDLE
    error_message: str | None = None
    _finalized: bool = field(default=False, init=False, repr=False)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def start(self) -> None:
        """Move the run from IDLE to RUNNING."""
        self._transition(RunStatus.RUNNING)

    def record_trade(self, trade: Trade) -> None:
        """Count a fill against this run.

        Raises:
            RunStateError: If the run is not running
        """
        if self.status != RunStatus.RUNNING:
            raise RunStateError(f"Cannot record trades on run {self.id} in state {self.status}")
        self.total_trades += 1
        if trade.profit_loss is not None and trade.profit_loss > 0:
            self.winning_trades += 1

    def finalize(
        self,
        status: RunStatus,
        final_capital: float | None,
        session_end: datetime | None,
        metrics: "PerformanceMetrics | None" = None,
        error_message: str | None = None,
    ) -> None:
        """Close the run. Allowed once; later calls raise RunStateError."""
        if self._finalized:
            raise RunStateError(f"Run {self.id} is already finalized")
        if not status.is_terminal:
            raise RunStateError(f"Cannot finalize run {self.id} with non-terminal state {status}")
        self._transition(status)

        self.final_capital = final_capital
        self.session_end = session_end
        self.error_message = error_message
        if metrics is not None:
            self.total_return = metrics.total_return
            self.max_drawdown = metrics.max_drawdown
            self.win_rate = metrics.win_rate
        self._finalized = True

    def fail(self, reason: str) -> None:
        """Finalize the run as FAILED without results."""
        self.finalize(RunStatus.FAILED, final_capital=None, session_end=None, error_message=reason)

    def _transition(self, target: RunStatus) -> None:
        if not self.status.can_transition_to(target):
            raise RunStateError(f"Run {self.id} cannot move from {self.status} to {target}")
        self.status = target

    def to_dict(self) -> dict[str, Any]:
        """Convert run to dictionary."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "session_type": self.session_type.value,
            "session_start": self.session_start.isoformat(),
            "session_end": self.session_end.isoformat() if self.session_end else None,
            "starting_capital": self.starting_capital,
            "final_capital": self.final_capital,
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "total_return": self.total_return,
            "max_drawdown": self.max_drawdown,
            "win_rate": self.win_rate,
            "status": self.status.value,
            "error_message": self.error_message,
            "parameters": self.parameters.to_dict(),
        }
