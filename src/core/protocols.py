"""
Core type definitions and protocols.

This module defines structural types shared between the engine and its
collaborators so neither side has to import the other's implementations.
"""

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

import pandas as pd

if TYPE_CHECKING:
    from src.core.interfaces.signal import ISignalSource
    from src.core.models.backtest import BacktestProgress


class Clock(Protocol):
    """Time source injected wherever the engine needs "now"."""

    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...


class PricePredictionModel(Protocol):
    """Black-box price model consumed by the model signal source.

    The model receives an OHLCV window (one row per candle, oldest first,
    indicator columns already added) and returns the predicted next price
    together with a confidence in ``[0, 1]``.
    """

    version: str

    def predict(self, features: pd.DataFrame) -> tuple[float, float]:
        """Predict ``(predicted_price, confidence)`` for the window."""
        ...


# Type aliases for commonly used callables
ProgressCallback = Callable[["BacktestProgress"], None]
SignalSourceFactory = Callable[[], "ISignalSource"]
