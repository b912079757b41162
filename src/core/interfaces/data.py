"""
Data access interfaces.

Market data comes in through IMarketDataSource, finished runs go out
through IResultSink. Both are consumed only at this boundary.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.models.market import Candle
from src.core.models.trade import Trade
from src.core.models.trading_run import TradingRun


class IMarketDataSource(ABC):
    """Abstract interface for historical candle retrieval."""

    @abstractmethod
    def get_candles(
        self, symbol: str, start: datetime, end: datetime, interval: str
    ) -> list[Candle]:
        """
        Load candles for ``symbol`` between ``start`` and ``end`` inclusive.

        Returns:
            Candles in ascending time order

        Raises:
            DataUnavailableError: If the source has nothing for the window
        """
        pass


class IResultSink(ABC):
    """Abstract interface for persisting finished runs."""

    @abstractmethod
    def persist(self, run: TradingRun, trades: list[Trade]) -> None:
        """Store a finalized run together with its trade ledger."""
        pass
