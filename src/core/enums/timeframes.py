"""
Candle interval enumerations.

This module defines the candle intervals the market data source can serve.
"""

from datetime import timedelta
from enum import StrEnum


class Timeframe(StrEnum):
    """
    Allowed candle intervals.

    Following standard trading conventions for candlestick intervals.
    """

    H1 = "1h"  # 1 hour
    H4 = "4h"  # 4 hours
    D1 = "1d"  # 1 day

    @classmethod
    def to_seconds(cls, timeframe: "Timeframe") -> int:
        """
        Convert timeframe to seconds.

        Args:
            timeframe: Timeframe enum value

        Returns:
            Number of seconds in the timeframe
        """
        conversions = {
            cls.H1: 3600,
            cls.H4: 14400,
            cls.D1: 86400,
        }
        return conversions[timeframe]

    @classmethod
    def from_string(cls, value: str) -> "Timeframe":
        """
        Convert string to Timeframe enum.

        Args:
            value: String representation of timeframe

        Returns:
            Corresponding Timeframe enum value

        Raises:
            ValueError: If timeframe is not supported
        """
        value_lower = value.lower()

        for tf in cls:
            if tf.value == value_lower:
                return tf

        raise ValueError(
            f"Unsupported timeframe: {value}. "
            f"Supported timeframes: {', '.join([tf.value for tf in cls])}"
        )

    @property
    def duration(self) -> timedelta:
        """Length of one candle."""
        return timedelta(seconds=Timeframe.to_seconds(self))

    @property
    def pandas_freq(self) -> str:
        """Pandas resampling frequency for this interval."""
        return {Timeframe.H1: "1h", Timeframe.H4: "4h", Timeframe.D1: "1D"}[self]
