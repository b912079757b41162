"""
Custom exception hierarchy for backtesting platform.

This module defines domain-specific exceptions for better error handling.
"""


class BacktestException(Exception):
    """Base exception for all backtesting-related errors."""

    pass


class ValidationError(BacktestException):
    """Raised when input validation fails.

    The offending request field, when known, is kept in ``field`` so callers
    can surface it verbatim.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class DataError(BacktestException):
    """Raised when data access or processing fails."""

    pass


class DataUnavailableError(DataError):
    """Raised when no candles exist for the requested symbol and window."""

    def __init__(self, symbol: str, reason: str = "no candles for requested window"):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Market data unavailable for {symbol}: {reason}")


class SignalError(BacktestException):
    """Raised when the signal source cannot produce a prediction."""

    pass


class PositionLimitError(BacktestException):
    """Raised when opening a position would exceed the open-position cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Maximum open positions reached ({limit})")


class PositionNotFoundError(BacktestException):
    """Raised when trying to operate on a non-existent position."""

    def __init__(self, position_id: str):
        self.position_id = position_id
        super().__init__(f"Position not found: {position_id}")


class RunStateError(BacktestException):
    """Raised when a trading run is mutated outside its allowed lifecycle."""

    pass


class ConcurrencyLimitError(BacktestException):
    """Raised when a user already has the maximum number of active runs."""

    def __init__(self, user_id: str, limit: int):
        self.user_id = user_id
        self.limit = limit
        super().__init__(
            f"Maximum of {limit} active backtests allowed for user {user_id}. "
            "Please wait for current backtests to complete."
        )


class JobNotFoundError(BacktestException):
    """Raised when a backtest job id is unknown."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Backtest not found: {job_id}")
