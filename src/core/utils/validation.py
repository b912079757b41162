"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

import math
from datetime import UTC, datetime
from typing import Any

from src.core.exceptions.backtest import ValidationError


def validate_symbol(symbol: Any, param_name: str = "symbol") -> str:
    """Validate that a value is a non-empty coin symbol.

    Args:
        symbol: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The symbol, stripped and upper-cased

    Raises:
        ValidationError: If symbol is missing or blank
    """
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValidationError(f"{param_name} is required and must be a string", field=param_name)
    return symbol.strip().upper()


def validate_positive(value: float, param_name: str) -> float:
    """Validate that a numeric value is positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated value

    Raises:
        ValidationError: If value is not positive
    """
    if not _is_number(value) or value <= 0:
        raise ValidationError(f"{param_name} must be positive, got {value}", field=param_name)
    return value


def validate_range(value: Any, lower: float, upper: float, param_name: str) -> float:
    """Validate that a numeric value lies in the closed range ``[lower, upper]``.

    Raises:
        ValidationError: If value is not a finite number inside the range
    """
    if not _is_number(value) or value < lower or value > upper:
        raise ValidationError(
            f"{param_name} must be between {lower} and {upper}, got {value}", field=param_name
        )
    return float(value)


def validate_int_range(value: Any, lower: int, upper: int, param_name: str) -> int:
    """Validate that a value is an integer inside ``[lower, upper]``.

    Booleans are rejected even though they subclass int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{param_name} must be an integer, got {type(value).__name__}", field=param_name
        )
    if value < lower or value > upper:
        raise ValidationError(
            f"{param_name} must be between {lower} and {upper}, got {value}", field=param_name
        )
    return value


def parse_timestamp(value: Any, param_name: str) -> datetime:
    """Parse a datetime or ISO-8601 string into an aware UTC datetime.

    Naive values are interpreted as UTC.

    Raises:
        ValidationError: If value is missing or cannot be parsed
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{param_name} is required", field=param_name)

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(
                f"Invalid {param_name} format. Use YYYY-MM-DD or ISO format", field=param_name
            ) from e
    else:
        raise ValidationError(
            f"{param_name} must be a datetime or ISO string, got {type(value).__name__}",
            field=param_name,
        )

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _is_number(value: Any) -> bool:
    """Check for a finite int or float that is not a bool."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)
