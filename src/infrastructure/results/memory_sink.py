"""
In-memory result sink.
"""

from threading import RLock

from cachetools import LRUCache
from loguru import logger

from src.core.interfaces.data import IResultSink
from src.core.models.trade import Trade
from src.core.models.trading_run import TradingRun


class InMemoryResultSink(IResultSink):
    """Keeps the most recent finalized runs and their trades in an LRU cache."""

    DEFAULT_CAPACITY = 100

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError("Capacity must be positive")
        self._results: LRUCache[str, tuple[TradingRun, list[Trade]]] = LRUCache(maxsize=capacity)
        self._lock = RLock()

    def persist(self, run: TradingRun, trades: list[Trade]) -> None:
        with self._lock:
            self._results[run.id] = (run, list(trades))
        logger.debug(f"Stored run {run.id} ({run.status.value}) with {len(trades)} trades")

    def get(self, run_id: str) -> tuple[TradingRun, list[Trade]] | None:
        """Stored run and trades, or None if unknown or evicted."""
        with self._lock:
            return self._results.get(run_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
