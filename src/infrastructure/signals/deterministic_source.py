"""
Deterministic signal source.
"""

from collections.abc import Mapping
from datetime import datetime

from src.core.enums import SignalDirection
from src.core.exceptions.backtest import SignalError
from src.core.interfaces.signal import ISignalSource
from src.core.models.market import Candle, Signal


class DeterministicSignalSource(ISignalSource):
    """
    Replays predetermined signals keyed by candle timestamp.

    The signal for a window is looked up by the timestamp of its last
    candle. Windows without an entry get ``default``, or a zero-confidence
    hold when no default is set.
    """

    def __init__(
        self,
        schedule: Mapping[datetime, Signal] | None = None,
        default: Signal | None = None,
    ):
        self._schedule = dict(schedule or {})
        self._default = default
        self.calls = 0

    @classmethod
    def always(
        cls, direction: SignalDirection, confidence: float = 1.0
    ) -> "DeterministicSignalSource":
        """Source returning the same direction and confidence for every window."""
        return cls(default=Signal(direction=direction, confidence=confidence, predicted_price=0.0))

    def predict(self, window: list[Candle]) -> Signal:
        if not window:
            raise SignalError("Cannot predict from an empty candle window")
        self.calls += 1

        current = window[-1]
        signal = self._schedule.get(current.timestamp, self._default)
        if signal is None:
            return Signal.hold(current.close)
        return signal
