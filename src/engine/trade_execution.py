"""
Trade execution engine.

Turns a side, quantity and price into the fill values recorded on a Trade.
Every method is pure: the engine keeps no state besides its fee schedule.
"""

from loguru import logger

from src.core.enums import TradeSide
from src.core.models.position import Position
from src.core.models.trade import FeeSchedule, TradeExecution
from src.core.types.financial import (
    HUNDRED,
    calculate_notional_value,
    calculate_profit_loss,
    clamp,
    round_amount,
)
from src.core.utils.decorators import validate_inputs


class TradeExecutionEngine:
    """
    Computes fill values with asymmetric fees.

    Buys pay the taker rate and cost ``total + fee``; sells pay the maker
    rate and return ``total - fee``.
    """

    def __init__(self, fee_schedule: FeeSchedule | None = None):
        self.fee_schedule = fee_schedule or FeeSchedule()

    def calculate_fee(
        self, side: TradeSide, total_value: float, fee_schedule: FeeSchedule | None = None
    ) -> float:
        """
        Calculate the clamped fee for a notional value.

        Args:
            side: Trade side, selects maker or taker rate
            total_value: Notional value of the fill
            fee_schedule: Overrides the engine's schedule for this call

        Returns:
            Fee within ``[minimum_fee, maximum_fee]``
        """
        schedule = fee_schedule or self.fee_schedule
        raw_fee = total_value * schedule.fee_percent(side) / HUNDRED
        return round_amount(clamp(raw_fee, schedule.minimum_fee, schedule.maximum_fee))

    @validate_inputs
    def execute(
        self,
        side: TradeSide,
        quantity: float,
        market_price: float,
        portfolio_value_before: float,
        fee_schedule: FeeSchedule | None = None,
    ) -> TradeExecution:
        """
        Compute the values of one fill.

        Args:
            side: Buy or sell
            quantity: Quantity to trade, must be positive
            market_price: Fill price, must be positive
            portfolio_value_before: Cash balance before the fill
            fee_schedule: Overrides the engine's schedule for this call

        Returns:
            TradeExecution with total, fee, net and resulting balance

        Raises:
            ValidationError: If quantity or market_price is not positive
        """
        total_value = calculate_notional_value(quantity, market_price)
        fee = self.calculate_fee(side, total_value, fee_schedule)

        if side == TradeSide.BUY:
            net_value = round_amount(total_value + fee)
            portfolio_value_after = round_amount(portfolio_value_before - net_value)
        else:
            net_value = round_amount(total_value - fee)
            portfolio_value_after = round_amount(portfolio_value_before + net_value)

        logger.debug(
            f"Executed {side.value} {quantity} @ {market_price}: "
            f"total={total_value} fee={fee} net={net_value}"
        )

        return TradeExecution(
            side=side,
            quantity=quantity,
            price=market_price,
            total_value=total_value,
            fee=fee,
            net_value=net_value,
            portfolio_value_before=portfolio_value_before,
            portfolio_value_after=portfolio_value_after,
        )

    def buy_cost(
        self, quantity: float, market_price: float, fee_schedule: FeeSchedule | None = None
    ) -> float:
        """Cash needed to buy ``quantity`` at ``market_price``, fee included."""
        total_value = calculate_notional_value(quantity, market_price)
        fee = self.calculate_fee(TradeSide.BUY, total_value, fee_schedule)
        return round_amount(total_value + fee)

    @staticmethod
    def profit_loss(position: Position, exit_execution: TradeExecution) -> float:
        """
        Realised P/L of closing ``position`` with ``exit_execution``.

        Returns:
            (exit price * qty - exit fee) - (entry price * qty + entry fee)
        """
        return calculate_profit_loss(
            sell_price=exit_execution.price,
            buy_price=position.entry_price,
            quantity=position.quantity,
            sell_fee=exit_execution.fee,
            buy_fee=position.entry_fee,
        )
