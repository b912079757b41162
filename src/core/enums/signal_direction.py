"""
Prediction direction enumeration.
"""

from enum import StrEnum


class SignalDirection(StrEnum):
    """
    Predicted price movement.

    Only UP signals open positions.
    """

    UP = "up"
    DOWN = "down"
    HOLD = "hold"

    @property
    def is_entry(self) -> bool:
        """Check if the direction asks for a new long position."""
        return self == self.UP

    @property
    def is_exit(self) -> bool:
        """Check if the direction asks to leave open positions."""
        return self == self.DOWN

    @classmethod
    def from_price_change(cls, change_percent: float, band_percent: float) -> "SignalDirection":
        """
        Classify an expected percentage move.

        Args:
            change_percent: Expected move in percent of the current price
            band_percent: Moves inside +/- this band are a hold

        Returns:
            Direction for the move
        """
        if change_percent > band_percent:
            return cls.UP
        if change_percent < -band_percent:
            return cls.DOWN
        return cls.HOLD
