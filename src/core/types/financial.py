"""
Financial data types for high-performance backtesting calculations.

This module provides float-based helpers optimized for speed in backtesting
scenarios. Float64 gives ~15-16 significant digits, which is enough for
replaying historical data; every stored money value goes through one of the
rounding helpers below so results stay reproducible across runs.

Rounding rules:
- Money values (notional, fee, net value, P/L) round half-even to 8 places
- Quantities are floored to 8 places so a buy never exceeds its budget
- Percentages round to 4 places
"""

import math

# Financial calculation precision (number of decimal places)
FINANCIAL_DECIMALS = 8  # 8 decimal places (crypto standard)
PERCENTAGE_DECIMALS = 4  # 4 decimal places for percentages
PRICE_DECIMALS = 8  # Crypto prices below one cent still need precision

# Common financial values as float constants
ZERO = 0.0
ONE = 1.0
HUNDRED = 100.0


def to_float(value: str | int | float) -> float:
    """Convert various numeric types to float.

    Args:
        value: Numeric value to convert

    Returns:
        Float representation of the value

    Examples:
        >>> to_float(50000)
        50000.0
        >>> to_float('1.5')
        1.5
    """
    if isinstance(value, float):
        return value
    return float(value)


def round_price(price: float) -> float:
    """Round price to appropriate precision for trading."""
    return round(price, PRICE_DECIMALS)


def round_amount(amount: float) -> float:
    """Round money amount to appropriate precision for trading."""
    return round(amount, FINANCIAL_DECIMALS)


def floor_quantity(quantity: float) -> float:
    """Floor a quantity to the smallest tradable unit.

    Args:
        quantity: Raw quantity derived from a budget

    Returns:
        Quantity rounded towards zero at 8 decimal places

    Examples:
        >>> floor_quantity(0.123456789)
        0.12345678
    """
    factor = 10**FINANCIAL_DECIMALS
    # Absorb float noise such as 0.29 * 1e8 == 28999999.999999996
    return math.floor(round(quantity * factor, 4)) / factor


def round_percentage(percentage: float) -> float:
    """Round percentage to appropriate precision."""
    return round(percentage, PERCENTAGE_DECIMALS)


def calculate_notional_value(quantity: float, price: float) -> float:
    """Calculate notional value with proper precision.

    Args:
        quantity: Traded quantity
        price: Asset price

    Returns:
        Notional value as float
    """
    return round_amount(quantity * price)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into ``[lower, upper]``."""
    return max(lower, min(value, upper))


def calculate_profit_loss(
    sell_price: float,
    buy_price: float,
    quantity: float,
    sell_fee: float,
    buy_fee: float,
) -> float:
    """Calculate realised P/L of a round trip.

    Args:
        sell_price: Exit fill price
        buy_price: Entry fill price
        quantity: Quantity bought and sold
        sell_fee: Fee charged on the exit
        buy_fee: Fee charged on the entry

    Returns:
        (sell proceeds - sell fee) - (buy cost + buy fee)
    """
    sell_proceeds = (sell_price * quantity) - sell_fee
    buy_cost = (buy_price * quantity) + buy_fee
    return round_amount(sell_proceeds - buy_cost)


def safe_float_comparison(a: float, b: float, tolerance: float = 1e-9) -> bool:
    """Compare floats with tolerance for precision issues.

    Args:
        a: First float to compare
        b: Second float to compare
        tolerance: Acceptable difference (default: 1e-9)

    Returns:
        True if floats are equal within tolerance

    Examples:
        >>> safe_float_comparison(0.1 + 0.2, 0.3)
        True
        >>> safe_float_comparison(1000000.1, 1000000.2, 0.01)
        False
    """
    return abs(a - b) < tolerance


def finite_or_zero(value: float) -> float:
    """Replace NaN and infinities with zero."""
    return value if math.isfinite(value) else ZERO
