"""
Backtest request validation.

Rejects malformed or out-of-policy requests before any simulation work
starts. Checks run in a fixed order and the first failure wins, so callers
always get a single, field-specific error.
"""

from datetime import datetime, timedelta

from src.core.constants import (
    MAX_BACKTEST_DURATION_DAYS,
    MAX_CONFIDENCE_THRESHOLD,
    MAX_OPEN_POSITIONS,
    MAX_RISK_PER_TRADE,
    MAX_SIGNAL_LOOKBACK,
    MAX_STARTING_CAPITAL,
    MAX_STOP_LOSS_PERCENT,
    MAX_TAKE_PROFIT_PERCENT,
    MIN_CONFIDENCE_THRESHOLD,
    MIN_OPEN_POSITIONS,
    MIN_STOP_LOSS_PERCENT,
    MIN_TAKE_PROFIT_PERCENT,
    SUPPORTED_INTERVALS,
)
from src.core.exceptions.backtest import ValidationError
from src.core.models.backtest import BacktestRequest, StrategyParameters
from src.core.protocols import Clock
from src.core.utils.validation import (
    parse_timestamp,
    validate_int_range,
    validate_positive,
    validate_range,
    validate_symbol,
)


class RequestValidator:
    """Validates BacktestRequests against date, capital and parameter policy."""

    def __init__(self, clock: Clock, max_starting_capital: float = MAX_STARTING_CAPITAL):
        self._clock = clock
        self._max_starting_capital = max_starting_capital

    def validate(self, request: BacktestRequest) -> None:
        """
        Validate a backtest request.

        Args:
            request: Request to check

        Raises:
            ValidationError: On the first failing check, with ``field`` set
        """
        validate_symbol(request.symbol)
        self._validate_window(request.start, request.end)
        self._validate_capital(request.starting_capital)
        self._validate_parameters(request.parameters)

    def _validate_window(self, raw_start: object, raw_end: object) -> tuple[datetime, datetime]:
        start = parse_timestamp(raw_start, "start")
        end = parse_timestamp(raw_end, "end")

        if start >= end:
            raise ValidationError("Start date must be before end date", field="start")
        if end > self._clock.now():
            raise ValidationError("End date cannot be in the future", field="end")
        if end - start > timedelta(days=MAX_BACKTEST_DURATION_DAYS):
            raise ValidationError("Backtest period cannot exceed 1 year", field="end")
        return start, end

    def _validate_capital(self, starting_capital: object) -> None:
        if (
            isinstance(starting_capital, bool)
            or not isinstance(starting_capital, int | float)
            or not starting_capital > 0
        ):
            raise ValidationError(
                f"Starting capital must be positive, got {starting_capital}",
                field="starting_capital",
            )
        if starting_capital > self._max_starting_capital:
            raise ValidationError(
                f"Starting capital cannot exceed {self._max_starting_capital:,.0f}",
                field="starting_capital",
            )

    def _validate_parameters(self, parameters: StrategyParameters) -> None:
        validate_range(
            parameters.stop_loss_percent,
            MIN_STOP_LOSS_PERCENT,
            MAX_STOP_LOSS_PERCENT,
            "stop_loss_percent",
        )
        validate_range(
            parameters.take_profit_percent,
            MIN_TAKE_PROFIT_PERCENT,
            MAX_TAKE_PROFIT_PERCENT,
            "take_profit_percent",
        )
        validate_range(
            parameters.confidence_threshold,
            MIN_CONFIDENCE_THRESHOLD,
            MAX_CONFIDENCE_THRESHOLD,
            "confidence_threshold",
        )
        validate_int_range(
            parameters.max_open_positions,
            MIN_OPEN_POSITIONS,
            MAX_OPEN_POSITIONS,
            "max_open_positions",
        )

        validate_positive(parameters.risk_per_trade, "risk_per_trade")
        validate_range(parameters.risk_per_trade, 0.0, MAX_RISK_PER_TRADE, "risk_per_trade")

        if parameters.interval not in SUPPORTED_INTERVALS:
            raise ValidationError(
                f"Unsupported interval: {parameters.interval}. "
                f"Supported intervals: {', '.join(SUPPORTED_INTERVALS)}",
                field="interval",
            )
        validate_int_range(parameters.signal_lookback, 1, MAX_SIGNAL_LOOKBACK, "signal_lookback")
