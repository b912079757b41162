"""
Position domain model.
Optimized for high-performance backtesting with float operations.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from src.core.exceptions.backtest import ValidationError
from src.core.types.financial import HUNDRED, ZERO, round_amount, round_price


@dataclass
class Position:
    """An open long position held by the risk manager.

    Stop-loss and take-profit levels are fixed when the position is opened.
    A level of ``None`` means that exit is disabled.
    """

    symbol: str
    entry_price: float
    quantity: float
    entry_time: datetime
    entry_fee: float
    stop_loss_price: float | None
    take_profit_price: float | None
    entry_confidence: float = 0.0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        """Validate position data after initialization."""
        if self.entry_price <= ZERO:
            raise ValidationError(f"Entry price must be positive, got {self.entry_price}")
        if self.quantity <= ZERO:
            raise ValidationError(f"Quantity must be positive, got {self.quantity}")
        if self.entry_fee < ZERO:
            raise ValidationError(f"Entry fee must be non-negative, got {self.entry_fee}")

    @classmethod
    def open(
        cls,
        symbol: str,
        entry_price: float,
        quantity: float,
        entry_time: datetime,
        entry_fee: float,
        stop_loss_percent: float,
        take_profit_percent: float,
        entry_confidence: float = 0.0,
    ) -> "Position":
        """Open a position and derive its exit levels from the entry price.

        Args:
            symbol: Traded symbol
            entry_price: Fill price of the buy
            quantity: Bought quantity
            entry_time: Time of the buy
            entry_fee: Fee paid on the buy
            stop_loss_percent: Distance of the stop below entry, 0 disables it
            take_profit_percent: Distance of the target above entry, 0 disables it
            entry_confidence: Confidence of the signal that opened the position

        Returns:
            New Position
        """
        stop_loss_price = None
        if stop_loss_percent > ZERO:
            stop_loss_price = round_price(entry_price * (1 - stop_loss_percent / HUNDRED))

        take_profit_price = None
        if take_profit_percent > ZERO:
            take_profit_price = round_price(entry_price * (1 + take_profit_percent / HUNDRED))

        return cls(
            symbol=symbol,
            entry_price=entry_price,
            quantity=quantity,
            entry_time=entry_time,
            entry_fee=entry_fee,
            stop_loss_price=stop_loss_price,
            take_profit_price=take_profit_price,
            entry_confidence=entry_confidence,
        )

    @property
    def cost_basis(self) -> float:
        """Cash spent to open the position, fee included."""
        return round_amount(self.entry_price * self.quantity + self.entry_fee)

    def market_value(self, current_price: float) -> float:
        """Value of the position at ``current_price``, before exit fees."""
        return round_amount(self.quantity * current_price)

    def unrealized_profit_loss(self, current_price: float) -> float:
        """Mark-to-market P/L, ignoring the exit fee."""
        return round_amount(self.market_value(current_price) - self.cost_basis)
