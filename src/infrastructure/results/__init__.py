"""
Result sinks for finished backtest runs.
"""

from .memory_sink import InMemoryResultSink

__all__ = ["InMemoryResultSink"]
