"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    FINANCIAL_DECIMALS,
    HUNDRED,
    ONE,
    PERCENTAGE_DECIMALS,
    PRICE_DECIMALS,
    ZERO,
    calculate_notional_value,
    calculate_profit_loss,
    clamp,
    finite_or_zero,
    floor_quantity,
    round_amount,
    round_percentage,
    round_price,
    safe_float_comparison,
    to_float,
)

__all__ = [
    # Utility functions
    "to_float",
    "round_price",
    "round_amount",
    "round_percentage",
    "floor_quantity",
    "calculate_notional_value",
    "calculate_profit_loss",
    "clamp",
    "finite_or_zero",
    "safe_float_comparison",
    # Constants
    "FINANCIAL_DECIMALS",
    "PERCENTAGE_DECIMALS",
    "PRICE_DECIMALS",
    "ZERO",
    "ONE",
    "HUNDRED",
]
