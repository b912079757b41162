"""
Risk manager.

Owns the open positions of one run and decides when a stop-loss or
take-profit level forces an exit. Levels are fixed at entry.
"""

from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from src.core.enums import TradeReason
from src.core.exceptions.backtest import PositionLimitError, PositionNotFoundError
from src.core.models.market import Candle
from src.core.models.position import Position
from src.core.types.financial import round_amount


@dataclass(frozen=True)
class ExitDecision:
    """A forced exit for one position."""

    position: Position
    reason: TradeReason
    price: float


class RiskManager:
    """
    Per-run position book with stop-loss/take-profit evaluation.

    When one candle's range reaches both levels of a position, the
    stop-loss wins.
    """

    def __init__(
        self,
        stop_loss_percent: float,
        take_profit_percent: float,
        max_open_positions: int,
    ):
        self.stop_loss_percent = stop_loss_percent
        self.take_profit_percent = take_profit_percent
        self.max_open_positions = max_open_positions
        self._positions: dict[str, Position] = {}

    @property
    def positions(self) -> list[Position]:
        """Open positions in the order they were opened."""
        return list(self._positions.values())

    @property
    def open_count(self) -> int:
        return len(self._positions)

    def can_open(self) -> bool:
        """Check if another position fits under the cap."""
        return len(self._positions) < self.max_open_positions

    def open_position(
        self,
        symbol: str,
        entry_price: float,
        quantity: float,
        entry_time: datetime,
        entry_fee: float,
        entry_confidence: float = 0.0,
    ) -> Position:
        """
        Register a new position and fix its exit levels.

        Raises:
            PositionLimitError: If the cap is already reached
        """
        if not self.can_open():
            raise PositionLimitError(self.max_open_positions)

        position = Position.open(
            symbol=symbol,
            entry_price=entry_price,
            quantity=quantity,
            entry_time=entry_time,
            entry_fee=entry_fee,
            stop_loss_percent=self.stop_loss_percent,
            take_profit_percent=self.take_profit_percent,
            entry_confidence=entry_confidence,
        )
        self._positions[position.id] = position
        logger.debug(
            f"Opened position {position.id} {quantity} {symbol} @ {entry_price} "
            f"(stop={position.stop_loss_price}, target={position.take_profit_price})"
        )
        return position

    def close_position(self, position_id: str) -> Position:
        """
        Remove a position from the book.

        Raises:
            PositionNotFoundError: If the position is not open
        """
        position = self._positions.pop(position_id, None)
        if position is None:
            raise PositionNotFoundError(position_id)
        return position

    @staticmethod
    def evaluate(position: Position, current_price: float) -> TradeReason | None:
        """
        Evaluate a single price tick against a position's levels.

        Returns:
            STOP_LOSS, TAKE_PROFIT or None when the position stays open
        """
        if position.stop_loss_price is not None and current_price <= position.stop_loss_price:
            return TradeReason.STOP_LOSS
        if position.take_profit_price is not None and current_price >= position.take_profit_price:
            return TradeReason.TAKE_PROFIT
        return None

    @staticmethod
    def evaluate_candle(position: Position, candle: Candle) -> ExitDecision | None:
        """
        Evaluate a whole candle against a position's levels.

        The low is tested against the stop and the high against the target.
        Fills happen at the level, or at the open when the candle gapped
        through it.
        """
        stop = position.stop_loss_price
        if stop is not None and candle.low <= stop:
            return ExitDecision(position, TradeReason.STOP_LOSS, min(stop, candle.open))

        target = position.take_profit_price
        if target is not None and candle.high >= target:
            return ExitDecision(position, TradeReason.TAKE_PROFIT, max(target, candle.open))

        return None

    def check_exits(self, candle: Candle) -> list[ExitDecision]:
        """Evaluate every open position against ``candle``."""
        decisions = []
        for position in self._positions.values():
            decision = self.evaluate_candle(position, candle)
            if decision is not None:
                decisions.append(decision)
        return decisions

    def market_value(self, current_price: float) -> float:
        """Value of all open positions at ``current_price``."""
        return round_amount(
            sum(position.market_value(current_price) for position in self._positions.values())
        )
