"""
In-memory market data source.
"""

from datetime import datetime

from src.core.exceptions.backtest import DataUnavailableError
from src.core.interfaces.data import IMarketDataSource
from src.core.models.market import Candle


class InMemoryMarketDataSource(IMarketDataSource):
    """Serves candles registered per symbol and interval. Used by tests and demos."""

    def __init__(self) -> None:
        self._candles: dict[tuple[str, str], list[Candle]] = {}

    def add_candles(self, symbol: str, candles: list[Candle], interval: str = "1h") -> None:
        """Register candles for a symbol and interval, replacing earlier ones."""
        key = (symbol.strip().upper(), interval)
        self._candles[key] = sorted(candles, key=lambda candle: candle.timestamp)

    def get_candles(
        self, symbol: str, start: datetime, end: datetime, interval: str
    ) -> list[Candle]:
        stored = self._candles.get((symbol.strip().upper(), interval), [])
        candles = [candle for candle in stored if start <= candle.timestamp <= end]
        if not candles:
            raise DataUnavailableError(symbol)
        return candles

    def get_available_symbols(self) -> list[str]:
        """Symbols with registered candles."""
        return sorted({symbol for symbol, _ in self._candles})
