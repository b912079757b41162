"""
Core enumerations for the backtesting platform.

This module provides centralized enumerations for domain concepts
like trade sides, trade reasons, run states, signal directions and
candle intervals.
"""

from .run_status import RunMode, RunStatus, SessionType
from .signal_direction import SignalDirection
from .timeframes import Timeframe
from .trade_types import TradeReason, TradeSide

__all__ = [
    "TradeSide",
    "TradeReason",
    "RunStatus",
    "RunMode",
    "SessionType",
    "SignalDirection",
    "Timeframe",
]
