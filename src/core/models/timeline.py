"""
Equity curve model.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .trade import Trade


@dataclass
class TimelinePoint:
    """Portfolio state at the end of one calendar day."""

    date: date
    portfolio_value: float
    price: float
    trades: list[Trade] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert timeline point to dictionary."""
        return {
            "date": self.date.isoformat(),
            "portfolio_value": self.portfolio_value,
            "price": self.price,
            "trade_count": self.trade_count,
            "trades": [trade.to_dict() for trade in self.trades],
        }

    @property
    def trade_count(self) -> int:
        return len(self.trades)
