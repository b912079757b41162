"""
Market data and prediction domain models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.core.enums import SignalDirection
from src.core.exceptions.backtest import ValidationError


@dataclass(frozen=True)
class Candle:
    """One OHLCV bucket. Timestamps are aware UTC datetimes."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self) -> None:
        """Validate candle data after initialization."""
        if min(self.open, self.high, self.low, self.close) <= 0:
            raise ValidationError(f"Candle prices must be positive at {self.timestamp}")
        if self.high < self.low:
            raise ValidationError(
                f"Candle high {self.high} is below low {self.low} at {self.timestamp}"
            )
        if self.volume < 0:
            raise ValidationError(f"Candle volume must be non-negative, got {self.volume}")

    def to_dict(self) -> dict[str, Any]:
        """Convert candle to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class Signal:
    """Prediction handed to the simulation driver for one candle."""

    direction: SignalDirection
    confidence: float
    predicted_price: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(f"Confidence must be between 0 and 1, got {self.confidence}")
        if self.predicted_price < 0:
            raise ValidationError(
                f"Predicted price must be non-negative, got {self.predicted_price}"
            )

    def meets_threshold(self, threshold: float) -> bool:
        """Check if the signal is confident enough to act on."""
        return self.confidence >= threshold

    @classmethod
    def hold(cls, price: float = 0.0) -> "Signal":
        """A zero-confidence hold, used when no prediction can be made."""
        return cls(direction=SignalDirection.HOLD, confidence=0.0, predicted_price=price)
