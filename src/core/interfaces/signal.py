"""
Signal source interface.
"""

from abc import ABC, abstractmethod

from src.core.models.market import Candle, Signal


class ISignalSource(ABC):
    """Abstract interface for price direction predictions."""

    @abstractmethod
    def predict(self, window: list[Candle]) -> Signal:
        """
        Predict the next move from the most recent candles.

        Args:
            window: Recent candles in ascending order, the last one is current

        Returns:
            Signal with direction, confidence in [0, 1] and predicted price

        Raises:
            SignalError: If no prediction can be produced
        """
        pass
