"""
Performance metrics model.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class PerformanceMetrics:
    """Summary statistics over the completed trades of a run.

    Percentages (returns, win rate, drawdown) are expressed in percent.
    ``profit_factor`` is ``inf`` when there are wins and no losses.
    """

    total_return: float
    annualized_return: float
    win_rate: float
    profit_factor: float
    avg_trade_return: float
    max_drawdown: float
    sharpe_ratio: float
    total_trades: int
    winning_trades: int = 0
    losing_trades: int = 0
    total_profit_loss: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    benchmark_return: float | None = None

    @classmethod
    def empty(cls) -> "PerformanceMetrics":
        """Metrics of a run without trades."""
        return cls(
            total_return=0.0,
            annualized_return=0.0,
            win_rate=0.0,
            profit_factor=0.0,
            avg_trade_return=0.0,
            max_drawdown=0.0,
            sharpe_ratio=0.0,
            total_trades=0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary."""
        return asdict(self)
