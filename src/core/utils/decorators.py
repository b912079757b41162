"""
Utility decorators for input validation and operation logging.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger

from src.core.utils.validation import validate_positive

_POSITIVE_PARAMS = ("quantity", "market_price", "price")

F = TypeVar("F", bound=Callable[..., Any])


def _validate_trading_parameters(func: Callable[..., Any], args: tuple, kwargs: dict) -> None:
    """Validate numeric trading parameters that must be strictly positive."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()

    for param_name, value in bound_args.arguments.items():
        if param_name in _POSITIVE_PARAMS and value is not None:
            validate_positive(value, param_name)


def validate_inputs(func: F) -> F:
    """Decorator rejecting non-positive quantity and price arguments."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        _validate_trading_parameters(func, args, kwargs)
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "value"):
        return str(value.value)  # Handle enum values
    if isinstance(value, bool | int | float | str):
        return value
    return type(value).__name__


def _create_context(func: Callable[..., Any], args: tuple, kwargs: dict) -> dict[str, Any]:
    """Create logging context with a short correlation id."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()

    context: dict[str, Any] = {"correlation_id": str(uuid.uuid4())[:8]}
    for param_name, value in bound_args.arguments.items():
        if param_name != "self":
            context[param_name] = _serialize_parameter_value(value)
    return context


def log_operation(func: F) -> F:
    """Decorator to log an operation's start, outcome and duration."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = _create_context(func, args, kwargs)
        func_name = func.__qualname__
        log = logger.bind(**context)

        log.debug(f"Operation started: {func_name}")
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)
            log.error(f"Operation failed: {func_name} ({type(e).__name__}: {e}) in {elapsed_ms}ms")
            raise

        elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)
        log.success(f"Operation completed: {func_name} in {elapsed_ms}ms")
        return result

    return wrapper  # type: ignore
