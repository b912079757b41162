"""
Simulation driver.

Replays ordered candles against the AI-signal strategy:

1. Open positions are checked against their stop-loss and take-profit levels.
2. While below the position cap, the signal source is asked for a
   prediction; a confident "up" signal opens a new position.
3. Equity and progress are recorded.

No entries are opened on the final candle, and positions still open there
are liquidated at its close with reason ``manual`` so every completed run
reports fully realised P/L.

All mutable state of a run lives in its SimulationContext. The driver itself
holds only collaborators, so one driver instance can serve many runs.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from src.core.constants import DEFAULT_PROGRESS_INTERVAL, MAX_TRADE_SIZE, MIN_TRADE_SIZE
from src.core.enums import RunStatus, TradeReason, TradeSide
from src.core.exceptions.backtest import DataError, DataUnavailableError, SignalError
from src.core.interfaces.data import IMarketDataSource
from src.core.interfaces.signal import ISignalSource
from src.core.models.backtest import BacktestProgress, BacktestRequest, StrategyParameters
from src.core.models.market import Candle, Signal
from src.core.models.performance import PerformanceMetrics
from src.core.models.position import Position
from src.core.models.trade import Trade
from src.core.models.trading_run import TradingRun
from src.core.protocols import ProgressCallback, SignalSourceFactory
from src.core.types.financial import HUNDRED, ZERO, floor_quantity, round_amount
from src.core.utils.validation import parse_timestamp

from .performance import PerformanceAnalytics
from .risk_manager import RiskManager
from .trade_execution import TradeExecutionEngine


def unexpected_error_message(error: BaseException) -> str:
    """Failure reason recorded for errors outside the data and signal taxonomy."""
    return f"Unexpected error: {type(error).__name__}"


class CancellationToken:
    """Cooperative cancellation flag, checked once per candle."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class SimulationContext:
    """Everything one run mutates while it is simulated."""

    run: TradingRun
    parameters: StrategyParameters
    risk_manager: RiskManager
    cash: float
    token: CancellationToken
    candles: list[Candle] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)
    equity_curve: list[float] = field(default_factory=list)
    processed: int = 0
    last_price: float | None = None
    last_time: datetime | None = None
    performance: PerformanceMetrics | None = None
    error_message: str | None = None

    @property
    def portfolio_value(self) -> float:
        """Cash plus open positions marked at the last price."""
        if self.last_price is None:
            return self.cash
        return round_amount(self.cash + self.risk_manager.market_value(self.last_price))

    def record(self, trade: Trade) -> None:
        self.trades.append(trade)
        self.run.record_trade(trade)


class SimulationDriver:
    """
    Runs one backtest at a time per call, with state kept in a fresh context.

    The signal source is created per run from ``signal_source_factory`` so
    sources that keep internal state are never shared between runs.
    """

    def __init__(
        self,
        data_source: IMarketDataSource,
        signal_source_factory: SignalSourceFactory,
        execution_engine: TradeExecutionEngine | None = None,
        analytics: PerformanceAnalytics | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ):
        if progress_interval < 1:
            raise ValueError("Progress interval must be positive")
        self._data_source = data_source
        self._signal_source_factory = signal_source_factory
        self._engine = execution_engine or TradeExecutionEngine()
        self._analytics = analytics or PerformanceAnalytics()
        self._progress_interval = progress_interval

    def run(
        self,
        request: BacktestRequest,
        token: CancellationToken | None = None,
        progress_callback: ProgressCallback | None = None,
        run_id: str | None = None,
    ) -> SimulationContext:
        """
        Simulate a validated request.

        Args:
            request: Request that already passed the RequestValidator
            token: Cancellation token, a private one is used when omitted
            progress_callback: Called every ``progress_interval`` candles
            run_id: Identifier for the TradingRun, generated when omitted

        Returns:
            The finalized context; ``context.run.status`` is COMPLETED,
            CANCELLED or FAILED
        """
        start = parse_timestamp(request.start, "start")
        end = parse_timestamp(request.end, "end")
        parameters = request.parameters

        run = TradingRun(
            symbol=request.symbol.strip().upper(),
            session_start=start,
            starting_capital=float(request.starting_capital),
            parameters=parameters,
        )
        if run_id is not None:
            run.id = run_id

        context = SimulationContext(
            run=run,
            parameters=parameters,
            risk_manager=RiskManager(
                stop_loss_percent=parameters.stop_loss_percent,
                take_profit_percent=parameters.take_profit_percent,
                max_open_positions=parameters.max_open_positions,
            ),
            cash=run.starting_capital,
            token=token or CancellationToken(),
        )

        run.start()
        logger.info(
            f"Backtest {run.id} started: {run.symbol} {parameters.interval} "
            f"{start.isoformat()} -> {end.isoformat()}, capital={run.starting_capital}"
        )

        try:
            context.candles = self._load_candles(run.symbol, start, end, parameters.interval)
            signal_source = self._signal_source_factory()
            cancelled = self._simulate(context, signal_source, progress_callback)
        except (DataError, SignalError) as e:
            logger.error(f"Backtest {run.id} failed: {e}")
            context.error_message = str(e)
            run.fail(str(e))
            return context
        except Exception as e:
            logger.exception(f"Backtest {run.id} failed unexpectedly")
            run.fail(unexpected_error_message(e))
            raise

        if cancelled:
            self._finalize(context, RunStatus.CANCELLED, session_end=context.last_time or start)
        else:
            self._finalize(context, RunStatus.COMPLETED, session_end=end)
        return context

    def _load_candles(
        self, symbol: str, start: datetime, end: datetime, interval: str
    ) -> list[Candle]:
        candles = self._data_source.get_candles(symbol, start, end, interval)
        if not candles:
            raise DataUnavailableError(symbol)
        logger.info(f"Loaded {len(candles)} {interval} candles for {symbol}")
        return sorted(candles, key=lambda candle: candle.timestamp)

    def _simulate(
        self,
        context: SimulationContext,
        signal_source: ISignalSource,
        progress_callback: ProgressCallback | None,
    ) -> bool:
        """Process candles in order. Returns True when cancelled midway."""
        candles = context.candles
        last_index = len(candles) - 1

        for index, candle in enumerate(candles):
            if context.token.is_cancelled:
                logger.info(
                    f"Backtest {context.run.id} cancelled after {context.processed} candles"
                )
                return True

            is_last = index == last_index
            self._apply_risk_exits(context, candle)
            if not is_last:
                self._apply_signal(context, signal_source, candles, index)
            else:
                self._liquidate(context, candle)

            context.processed = index + 1
            context.last_price = candle.close
            context.last_time = candle.timestamp
            context.equity_curve.append(context.portfolio_value)

            if progress_callback is not None and (
                context.processed % self._progress_interval == 0 or is_last
            ):
                progress_callback(self._progress(context))

        return False

    def _apply_risk_exits(self, context: SimulationContext, candle: Candle) -> None:
        for decision in context.risk_manager.check_exits(candle):
            self._close_position(
                context,
                decision.position,
                price=decision.price,
                reason=decision.reason,
                confidence=decision.position.entry_confidence,
                execution_time=candle.timestamp,
            )

    def _apply_signal(
        self,
        context: SimulationContext,
        signal_source: ISignalSource,
        candles: list[Candle],
        index: int,
    ) -> None:
        parameters = context.parameters
        risk_manager = context.risk_manager
        wants_entry = risk_manager.can_open()
        wants_exit = parameters.exit_on_bearish_signal and risk_manager.open_count > 0
        if not (wants_entry or wants_exit):
            return

        window = candles[max(0, index + 1 - parameters.signal_lookback) : index + 1]
        signal = signal_source.predict(window)
        if not signal.meets_threshold(parameters.confidence_threshold):
            return

        candle = candles[index]
        if wants_exit and signal.direction.is_exit:
            for position in risk_manager.positions:
                self._close_position(
                    context,
                    position,
                    price=candle.close,
                    reason=TradeReason.AI_SIGNAL,
                    confidence=signal.confidence,
                    execution_time=candle.timestamp,
                )
        elif wants_entry and signal.direction.is_entry:
            self._open_position(context, candle, signal)

    def _open_position(self, context: SimulationContext, candle: Candle, signal: Signal) -> None:
        price = candle.close
        quantity = self._size_position(context, price)
        if quantity < MIN_TRADE_SIZE:
            logger.debug(f"Skipping entry at {candle.timestamp}: position size below minimum")
            return

        execution = self._engine.execute(TradeSide.BUY, quantity, price, context.cash)
        position = context.risk_manager.open_position(
            symbol=context.run.symbol,
            entry_price=price,
            quantity=quantity,
            entry_time=candle.timestamp,
            entry_fee=execution.fee,
            entry_confidence=signal.confidence,
        )
        context.cash = execution.portfolio_value_after
        context.record(
            Trade.from_execution(
                execution,
                symbol=context.run.symbol,
                reason=TradeReason.AI_SIGNAL,
                confidence=signal.confidence,
                execution_time=candle.timestamp,
                run_id=context.run.id,
                position_id=position.id,
            )
        )

    def _size_position(self, context: SimulationContext, price: float) -> float:
        """
        Quantity for a new entry.

        ``risk_per_trade`` percent of the marked portfolio value, capped so
        that notional plus fee never exceeds the cash on hand.
        """
        schedule = self._engine.fee_schedule
        portfolio_value = context.cash + context.risk_manager.market_value(price)
        budget = portfolio_value * context.parameters.risk_per_trade / HUNDRED
        quantity = floor_quantity(budget / price)

        # Fee is at most max(minimum_fee, notional * rate)
        spendable = max(context.cash - schedule.minimum_fee, ZERO)
        affordable = floor_quantity(
            spendable / (price * (1 + schedule.taker_fee_percent / HUNDRED))
        )
        return min(quantity, affordable, MAX_TRADE_SIZE)

    def _close_position(
        self,
        context: SimulationContext,
        position: Position,
        price: float,
        reason: TradeReason,
        confidence: float,
        execution_time: datetime,
    ) -> None:
        execution = self._engine.execute(TradeSide.SELL, position.quantity, price, context.cash)
        profit_loss = self._engine.profit_loss(position, execution)
        context.risk_manager.close_position(position.id)
        context.cash = execution.portfolio_value_after
        context.record(
            Trade.from_execution(
                execution,
                symbol=position.symbol,
                reason=reason,
                confidence=confidence,
                execution_time=execution_time,
                profit_loss=profit_loss,
                run_id=context.run.id,
                position_id=position.id,
            )
        )
        logger.debug(
            f"Closed position {position.id} @ {price} ({reason.value}), P/L={profit_loss}"
        )

    def _liquidate(self, context: SimulationContext, candle: Candle) -> None:
        positions = context.risk_manager.positions
        if positions:
            logger.info(f"Liquidating {len(positions)} open positions at {candle.close}")
        for position in positions:
            self._close_position(
                context,
                position,
                price=candle.close,
                reason=TradeReason.MANUAL,
                confidence=position.entry_confidence,
                execution_time=candle.timestamp,
            )

    def _finalize(
        self, context: SimulationContext, status: RunStatus, session_end: datetime
    ) -> None:
        run = context.run
        final_capital = context.portfolio_value
        processed_candles = context.candles[: context.processed]
        context.performance = self._analytics.calculate(
            run,
            context.trades,
            final_capital=final_capital,
            session_end=session_end,
            equity_curve=[run.starting_capital, *context.equity_curve],
            candles=processed_candles,
        )
        run.finalize(
            status,
            final_capital=final_capital,
            session_end=session_end,
            metrics=context.performance,
        )
        logger.success(
            f"Backtest {run.id} {status.value}: {len(context.trades)} trades, "
            f"final capital {final_capital}, return {context.performance.total_return}%"
        )

    @staticmethod
    def _progress(context: SimulationContext) -> BacktestProgress:
        return BacktestProgress(
            run_id=context.run.id,
            processed=context.processed,
            total=len(context.candles),
            current_time=context.last_time,
            total_trades=len(context.trades),
            portfolio_value=context.portfolio_value,
        )
