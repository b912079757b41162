"""
Pydantic schemas for API request/response models.

Range checks on backtest parameters belong to the RequestValidator, so the
schemas only enforce shapes and types.
"""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.core.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_MAX_OPEN_POSITIONS,
    DEFAULT_RISK_PER_TRADE,
    DEFAULT_SIGNAL_LOOKBACK,
    DEFAULT_STARTING_CAPITAL,
    DEFAULT_STOP_LOSS_PERCENT,
    DEFAULT_TAKE_PROFIT_PERCENT,
)
from src.core.enums import RunMode, RunStatus, Timeframe
from src.core.models.backtest import BacktestRequest, StrategyParameters


class StrategyParametersModel(BaseModel):
    """Strategy parameters of a backtest submission."""

    stop_loss_percent: float = Field(
        default=DEFAULT_STOP_LOSS_PERCENT, description="Stop-loss distance (0-50%, 0 disables)"
    )
    take_profit_percent: float = Field(
        default=DEFAULT_TAKE_PROFIT_PERCENT,
        description="Take-profit distance (0-200%, 0 disables)",
    )
    confidence_threshold: float = Field(
        default=DEFAULT_CONFIDENCE_THRESHOLD, description="Minimum signal confidence (0.1-1.0)"
    )
    max_open_positions: int = Field(
        default=DEFAULT_MAX_OPEN_POSITIONS, description="Concurrent positions (1-10)"
    )
    risk_per_trade: float = Field(
        default=DEFAULT_RISK_PER_TRADE, description="Share of portfolio per entry (%)"
    )
    interval: str = Field(default=Timeframe.H1.value, description="Candle interval (1h, 4h, 1d)")
    signal_lookback: int = Field(
        default=DEFAULT_SIGNAL_LOOKBACK, description="Candles handed to the signal source"
    )
    exit_on_bearish_signal: bool = Field(
        default=False, description="Close positions on a confident down signal"
    )

    @field_validator("interval", mode="before")
    @classmethod
    def normalize_interval(cls, v: Any) -> Any:
        """Accept intervals in any letter case."""
        return v.strip().lower() if isinstance(v, str) else v

    def to_domain(self) -> StrategyParameters:
        return StrategyParameters(
            stop_loss_percent=self.stop_loss_percent,
            take_profit_percent=self.take_profit_percent,
            confidence_threshold=self.confidence_threshold,
            max_open_positions=self.max_open_positions,
            risk_per_trade=self.risk_per_trade,
            interval=self.interval,
            signal_lookback=self.signal_lookback,
            exit_on_bearish_signal=self.exit_on_bearish_signal,
        )


class BacktestSubmission(BaseModel):
    """Request model for backtest submission."""

    symbol: str = Field(..., description="Coin symbol, e.g. BTC")
    start: datetime | str = Field(..., description="Backtest start (ISO-8601)")
    end: datetime | str = Field(..., description="Backtest end (ISO-8601)")
    starting_capital: float = Field(
        default=DEFAULT_STARTING_CAPITAL, description="Starting capital in quote currency"
    )
    parameters: StrategyParametersModel = Field(default_factory=StrategyParametersModel)
    mode: RunMode = Field(default=RunMode.QUICK, description="quick or full")

    def to_domain(self) -> BacktestRequest:
        return BacktestRequest(
            symbol=self.symbol,
            start=self.start,
            end=self.end,
            starting_capital=self.starting_capital,
            parameters=self.parameters.to_domain(),
        )


class BacktestResponse(BaseModel):
    """Response model for backtest submission."""

    backtest_id: str
    status: RunStatus
    message: str
    result: dict[str, Any] | None = None


class BacktestStatusResponse(BaseModel):
    """Response model for a full backtest's status."""

    backtest_id: str
    status: RunStatus
    progress: dict[str, Any] | None = None
    result: dict[str, Any] | None = None
    error_message: str | None = None


class SymbolsResponse(BaseModel):
    """Response model for available symbols."""

    symbols: list[str]
    intervals: list[str]


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str
    message: str
    field: str | None = None


def to_json_safe(value: Any) -> Any:
    """Replace non-finite floats (an unbounded profit factor) with None, recursively."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_json_safe(item) for item in value]
    return value
