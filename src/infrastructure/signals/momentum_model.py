"""
Momentum price model.

A transparent stand-in for a trained model: it extrapolates the spread
between the fast and slow EMA and grows more confident as the trend
strengthens, backing off when RSI says the move is stretched.
"""

import math

import pandas as pd

from src.core.types.financial import clamp


class MomentumModel:
    """Trend-following PricePredictionModel built on indicator columns."""

    version = "momentum-1.0"

    def __init__(
        self,
        sensitivity: float = 2.0,
        base_confidence: float = 0.5,
        overbought: float = 70.0,
        oversold: float = 30.0,
    ):
        self.sensitivity = sensitivity
        self.base_confidence = base_confidence
        self.overbought = overbought
        self.oversold = oversold

    def predict(self, features: pd.DataFrame) -> tuple[float, float]:
        """
        Predict the next close.

        Args:
            features: Window with ``close``, ``ema_12``, ``ema_26`` and ``rsi``

        Returns:
            ``(predicted_price, confidence)``
        """
        last = features.iloc[-1]
        close = float(last["close"])
        if len(features) < 2:
            return close, 0.0

        ema_fast = float(last["ema_12"])
        ema_slow = float(last["ema_26"])
        trend = (ema_fast - ema_slow) / ema_slow if ema_slow else 0.0
        predicted_price = close * (1 + trend * self.sensitivity)

        confidence = self.base_confidence + min(abs(trend) * self.sensitivity * 10, 0.45)
        rsi = float(last["rsi"])
        if not math.isnan(rsi) and (
            (trend > 0 and rsi > self.overbought) or (trend < 0 and rsi < self.oversold)
        ):
            confidence *= 0.75

        return predicted_price, clamp(confidence, 0.0, 1.0)
