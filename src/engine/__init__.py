"""
Backtesting engine.

Request validation, trade execution, risk management, simulation, timeline
building, performance analytics and run orchestration.
"""

from .performance import PerformanceAnalytics
from .request_validator import RequestValidator
from .risk_manager import ExitDecision, RiskManager
from .runner import BacktestJob, BacktestJobManager, BacktestRunner
from .simulation import CancellationToken, SimulationContext, SimulationDriver
from .timeline import TimelineBuilder
from .trade_execution import TradeExecutionEngine

__all__ = [
    "BacktestJob",
    "BacktestJobManager",
    "BacktestRunner",
    "CancellationToken",
    "ExitDecision",
    "PerformanceAnalytics",
    "RequestValidator",
    "RiskManager",
    "SimulationContext",
    "SimulationDriver",
    "TimelineBuilder",
    "TradeExecutionEngine",
]
