"""
Trade domain models.
Optimized for high-performance backtesting with float operations.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.core.constants import (
    DEFAULT_MAKER_FEE_PERCENT,
    DEFAULT_MAXIMUM_FEE,
    DEFAULT_MINIMUM_FEE,
    DEFAULT_TAKER_FEE_PERCENT,
)
from src.core.enums import TradeReason, TradeSide
from src.core.exceptions.backtest import ValidationError


@dataclass(frozen=True)
class FeeSchedule:
    """Simulated exchange fees.

    Buys pay the taker rate, sells pay the maker rate. The computed fee is
    clamped into ``[minimum_fee, maximum_fee]``.
    """

    maker_fee_percent: float = DEFAULT_MAKER_FEE_PERCENT
    taker_fee_percent: float = DEFAULT_TAKER_FEE_PERCENT
    minimum_fee: float = DEFAULT_MINIMUM_FEE
    maximum_fee: float = DEFAULT_MAXIMUM_FEE

    def __post_init__(self) -> None:
        if self.maker_fee_percent < 0 or self.taker_fee_percent < 0:
            raise ValidationError("Fee percentages must be non-negative")
        if self.minimum_fee < 0:
            raise ValidationError(f"Minimum fee must be non-negative, got {self.minimum_fee}")
        if self.maximum_fee < self.minimum_fee:
            raise ValidationError(
                f"Maximum fee {self.maximum_fee} is below minimum fee {self.minimum_fee}"
            )

    def fee_percent(self, side: TradeSide) -> float:
        """Fee rate for a trade side."""
        return self.taker_fee_percent if side == TradeSide.BUY else self.maker_fee_percent


@dataclass(frozen=True)
class TradeExecution:
    """Computed fill values, before they are recorded as a Trade."""

    side: TradeSide
    quantity: float
    price: float
    total_value: float
    fee: float
    net_value: float
    portfolio_value_before: float
    portfolio_value_after: float


@dataclass(frozen=True)
class Trade:
    """Immutable record of one executed fill."""

    side: TradeSide
    symbol: str
    quantity: float
    price: float
    fee: float
    total_value: float
    net_value: float
    portfolio_value_before: float
    portfolio_value_after: float
    profit_loss: float | None
    reason: TradeReason
    confidence: float
    execution_time: datetime
    run_id: str | None = None
    position_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        """Validate trade data after initialization."""
        if self.quantity <= 0:
            raise ValidationError(f"Quantity must be positive, got {self.quantity}")
        if self.price <= 0:
            raise ValidationError(f"Price must be positive, got {self.price}")
        if self.fee < 0:
            raise ValidationError(f"Fee must be non-negative, got {self.fee}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(f"Confidence must be between 0 and 1, got {self.confidence}")
        if self.side == TradeSide.BUY and self.profit_loss is not None:
            raise ValidationError("Buy fills cannot carry profit/loss")

    @property
    def is_completed(self) -> bool:
        """Check if this fill closed a position and realised P/L."""
        return self.profit_loss is not None

    @classmethod
    def from_execution(
        cls,
        execution: TradeExecution,
        symbol: str,
        reason: TradeReason,
        confidence: float,
        execution_time: datetime,
        profit_loss: float | None = None,
        run_id: str | None = None,
        position_id: str | None = None,
    ) -> "Trade":
        """Record a computed execution as a Trade."""
        return cls(
            side=execution.side,
            symbol=symbol,
            quantity=execution.quantity,
            price=execution.price,
            fee=execution.fee,
            total_value=execution.total_value,
            net_value=execution.net_value,
            portfolio_value_before=execution.portfolio_value_before,
            portfolio_value_after=execution.portfolio_value_after,
            profit_loss=profit_loss,
            reason=reason,
            confidence=confidence,
            execution_time=execution_time,
            run_id=run_id,
            position_id=position_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert trade to dictionary."""
        return {
            "id": self.id,
            "run_id": self.run_id,
            "position_id": self.position_id,
            "side": self.side.value,
            "symbol": self.symbol,
            "quantity": self.quantity,
            "price": self.price,
            "fee": self.fee,
            "total_value": self.total_value,
            "net_value": self.net_value,
            "portfolio_value_before": self.portfolio_value_before,
            "portfolio_value_after": self.portfolio_value_after,
            "profit_loss": self.profit_loss,
            "reason": self.reason.value,
            "confidence": self.confidence,
            "execution_time": self.execution_time.isoformat(),
        }
