"""
Trade side and trade reason enumerations.

This module defines the allowed fill sides and the reasons a fill happens.
"""

from enum import StrEnum


class TradeSide(StrEnum):
    """
    Allowed trade sides.

    Buys open positions, sells close them.
    """

    BUY = "buy"
    SELL = "sell"

    @property
    def is_buy(self) -> bool:
        """Check if side is a buy."""
        return self == self.BUY

    @property
    def is_sell(self) -> bool:
        """Check if side is a sell."""
        return self == self.SELL


class TradeReason(StrEnum):
    """
    Allowed trade reasons.

    Defines why a fill was executed.
    """

    AI_SIGNAL = "ai_signal"
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    MANUAL = "manual"  # Liquidation at run end
