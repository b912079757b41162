"""
Technical Indicators Calculator.

Adds indicator columns to OHLCV windows before they are handed to a price
prediction model. Implements the Strategy Pattern so models can choose the
indicators they need.
"""

from typing import Protocol

import pandas as pd
from loguru import logger

from src.core.exceptions.backtest import DataError


class IndicatorStrategy(Protocol):
    """Protocol for technical indicator calculation strategies."""

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        """Return ``data`` with this indicator's columns added."""
        ...


class MovingAverageStrategy:
    """Simple and exponential moving averages of the close."""

    def __init__(
        self, sma_windows: tuple[int, ...] = (20, 50), ema_spans: tuple[int, ...] = (12, 26)
    ):
        self.sma_windows = sma_windows
        self.ema_spans = ema_spans

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        result = data.copy()
        for window in self.sma_windows:
            result[f"sma_{window}"] = result["close"].rolling(window=window, min_periods=1).mean()
        for span in self.ema_spans:
            result[f"ema_{span}"] = result["close"].ewm(span=span, adjust=False).mean()
        return result


class MACDStrategy:
    """MACD line, signal line and histogram (12/26/9)."""

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        result = data.copy()
        fast = result["close"].ewm(span=12, adjust=False).mean()
        slow = result["close"].ewm(span=26, adjust=False).mean()
        result["macd"] = fast - slow
        result["macd_signal"] = result["macd"].ewm(span=9, adjust=False).mean()
        result["macd_histogram"] = result["macd"] - result["macd_signal"]
        return result


class RSIStrategy:
    """Relative Strength Index over a rolling window."""

    def __init__(self, period: int = 14):
        self.period = period

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        """Add an ``rsi`` column; 100 when the window has no losses, 50 when flat."""
        result = data.copy()
        delta = result["close"].diff()
        gain = delta.clip(lower=0).rolling(window=self.period, min_periods=1).mean()
        loss = (-delta).clip(lower=0).rolling(window=self.period, min_periods=1).mean()

        rsi = 100 - 100 / (1 + gain / loss)
        rsi = rsi.mask((loss == 0) & (gain > 0), 100.0)
        result["rsi"] = rsi.mask((loss == 0) & (gain == 0), 50.0)
        return result


class BollingerBandsStrategy:
    """Bollinger Bands around a rolling mean of the close."""

    def __init__(self, period: int = 20, std_multiplier: float = 2.0):
        self.period = period
        self.std_multiplier = std_multiplier

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        result = data.copy()
        middle = result["close"].rolling(window=self.period, min_periods=1).mean()
        spread = result["close"].rolling(window=self.period, min_periods=1).std().fillna(0.0)
        result["bb_middle"] = middle
        result["bb_upper"] = middle + self.std_multiplier * spread
        result["bb_lower"] = middle - self.std_multiplier * spread
        return result


class TechnicalIndicatorsCalculator:
    """
    Technical indicators calculator using Strategy Pattern.

    Strategies run in registration order; each one sees the columns added
    by the previous ones.
    """

    def __init__(self, strategies: dict[str, IndicatorStrategy] | None = None) -> None:
        if strategies is None:
            strategies = {
                "moving_averages": MovingAverageStrategy(),
                "macd": MACDStrategy(),
                "rsi": RSIStrategy(),
                "bollinger_bands": BollingerBandsStrategy(),
            }
        self._strategies: dict[str, IndicatorStrategy] = dict(strategies)

    def add_strategy(self, name: str, strategy: IndicatorStrategy) -> None:
        """Add a new indicator calculation strategy."""
        self._strategies[name] = strategy

    def get_available_indicators(self) -> list[str]:
        """Get list of available indicator strategies."""
        return list(self._strategies)

    def calculate_all_indicators(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Calculate all configured technical indicators.

        Args:
            data: OHLCV DataFrame, oldest row first

        Returns:
            DataFrame with additional indicator columns

        Raises:
            DataError: If an indicator cannot be calculated
        """
        if data.empty:
            return data

        result = data
        for name, strategy in self._strategies.items():
            try:
                result = strategy.calculate(result)
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Failed to calculate {name} indicators: {e}")
                raise DataError(f"Technical indicator calculation failed for {name}") from e
        return result


def create_technical_indicators_calculator() -> TechnicalIndicatorsCalculator:
    """Factory function to create a calculator with the default strategies."""
    return TechnicalIndicatorsCalculator()
