"""
Performance analytics.

Derives PerformanceMetrics from a run and its trade ledger. Only completed
trades (fills that realised a profit or loss) count. Degenerate input such
as no trades, no losses or a flat equity curve yields documented sentinel
values instead of errors.
"""

from collections.abc import Sequence
from datetime import datetime

import numpy as np
from loguru import logger

from src.core.constants import DAYS_PER_YEAR, MIN_RETURN_STD
from src.core.models.market import Candle
from src.core.models.performance import PerformanceMetrics
from src.core.models.trade import Trade
from src.core.models.trading_run import TradingRun
from src.core.types.financial import (
    HUNDRED,
    ZERO,
    finite_or_zero,
    round_amount,
    round_percentage,
)


class PerformanceAnalytics:
    """
    Calculates return, win/loss and risk statistics.

    Calculations never mutate the run or the trades, so calling
    ``calculate`` twice on the same input gives equal results.
    """

    def calculate(
        self,
        run: TradingRun,
        trades: Sequence[Trade],
        *,
        final_capital: float | None = None,
        session_end: datetime | None = None,
        equity_curve: Sequence[float] | None = None,
        candles: Sequence[Candle] | None = None,
    ) -> PerformanceMetrics:
        """
        Calculate the metrics of a run.

        Args:
            run: Run supplying starting capital and session bounds
            trades: Trade ledger of the run
            final_capital: Overrides ``run.final_capital``
            session_end: Overrides ``run.session_end``
            equity_curve: Explicit equity curve, defaults to starting capital
                followed by the realised balance after each completed trade
            candles: Candles for the buy-and-hold benchmark

        Returns:
            PerformanceMetrics
        """
        profit_losses = self.completed_profit_losses(trades)
        starting_capital = run.starting_capital

        if final_capital is None:
            final_capital = run.final_capital
        if final_capital is None:
            final_capital = starting_capital + float(profit_losses.sum())

        total_return = self.calculate_total_return(starting_capital, final_capital)
        end = session_end or run.session_end
        days_elapsed = (end - run.session_start).total_seconds() / 86400 if end else 0.0

        if equity_curve is None:
            equity_curve = self.build_equity_curve(starting_capital, trades)

        wins = profit_losses[profit_losses > 0]
        losses = profit_losses[profit_losses < 0]
        completed = len(profit_losses)

        metrics = PerformanceMetrics(
            total_return=total_return,
            annualized_return=self.calculate_annualized_return(total_return, days_elapsed),
            win_rate=self.calculate_win_rate(profit_losses),
            profit_factor=self.calculate_profit_factor(profit_losses),
            avg_trade_return=round_amount(float(profit_losses.mean())) if completed else ZERO,
            max_drawdown=self.calculate_max_drawdown(equity_curve),
            sharpe_ratio=self.calculate_sharpe_ratio(equity_curve),
            total_trades=len(trades),
            winning_trades=len(wins),
            losing_trades=len(losses),
            total_profit_loss=round_amount(float(profit_losses.sum())),
            average_win=round_amount(float(wins.mean())) if len(wins) else ZERO,
            average_loss=round_amount(float(losses.mean())) if len(losses) else ZERO,
            largest_win=round_amount(float(wins.max())) if len(wins) else ZERO,
            largest_loss=round_amount(float(losses.min())) if len(losses) else ZERO,
            benchmark_return=self.calculate_benchmark_return(candles),
        )
        logger.debug(
            f"Calculated metrics for run {run.id}: {completed} completed trades, "
            f"return={metrics.total_return}%, drawdown={metrics.max_drawdown}%"
        )
        return metrics

    @staticmethod
    def completed_profit_losses(trades: Sequence[Trade]) -> np.ndarray:
        """Realised P/L of every completed trade, in ledger order."""
        return np.array(
            [trade.profit_loss for trade in trades if trade.profit_loss is not None],
            dtype=float,
        )

    @staticmethod
    def build_equity_curve(starting_capital: float, trades: Sequence[Trade]) -> list[float]:
        """Starting capital followed by the realised balance after each completed trade."""
        curve = [starting_capital]
        for trade in trades:
            if trade.profit_loss is not None:
                curve.append(round_amount(curve[-1] + trade.profit_loss))
        return curve

    @staticmethod
    def calculate_total_return(starting_capital: float, final_capital: float) -> float:
        """Return over the run in percent."""
        if starting_capital <= 0:
            return ZERO
        return round_percentage((final_capital - starting_capital) / starting_capital * HUNDRED)

    @staticmethod
    def calculate_annualized_return(total_return: float, days_elapsed: float) -> float:
        """
        Scale the total return linearly to one year.

        No compounding is applied, so short windows can give very large
        magnitudes. Zero when no time has elapsed.
        """
        if days_elapsed <= 0:
            return ZERO
        return round_percentage(finite_or_zero(total_return * DAYS_PER_YEAR / days_elapsed))

    @staticmethod
    def calculate_win_rate(profit_losses: np.ndarray) -> float:
        """Share of completed trades with a positive P/L, in percent."""
        if len(profit_losses) == 0:
            return ZERO
        winners = int((profit_losses > 0).sum())
        return round_percentage(winners / len(profit_losses) * HUNDRED)

    @staticmethod
    def calculate_profit_factor(profit_losses: np.ndarray) -> float:
        """
        Gross profit divided by gross loss.

        Returns ``inf`` for profits without losses and ``0`` when there is
        nothing to divide.
        """
        total_profits = float(profit_losses[profit_losses > 0].sum())
        total_losses = abs(float(profit_losses[profit_losses < 0].sum()))
        if total_losses == 0:
            return float("inf") if total_profits > 0 else ZERO
        return round_percentage(total_profits / total_losses)

    @staticmethod
    def calculate_max_drawdown(equity_curve: Sequence[float]) -> float:
        """Largest peak-to-trough decline of the curve, in percent."""
        values = np.asarray(equity_curve, dtype=float)
        if values.size < 2:
            return ZERO

        peaks = np.maximum.accumulate(values)
        with np.errstate(divide="ignore", invalid="ignore"):
            drawdowns = np.where(peaks > 0, (peaks - values) / peaks, 0.0)
        return round_percentage(finite_or_zero(float(drawdowns.max())) * HUNDRED)

    @staticmethod
    def calculate_sharpe_ratio(equity_curve: Sequence[float]) -> float:
        """
        Mean over standard deviation of the per-period returns.

        Zero when there are fewer than two returns or the returns do not vary.
        """
        values = np.asarray(equity_curve, dtype=float)
        if values.size < 3:
            return ZERO

        previous = values[:-1]
        with np.errstate(divide="ignore", invalid="ignore"):
            returns = np.where(previous != 0, np.diff(values) / previous, 0.0)

        std = float(np.std(returns))
        if not np.isfinite(std) or std < MIN_RETURN_STD:
            return ZERO
        return round_percentage(finite_or_zero(float(np.mean(returns)) / std))

    @staticmethod
    def calculate_benchmark_return(candles: Sequence[Candle] | None) -> float | None:
        """Buy-and-hold return from the first to the last close, in percent."""
        if not candles:
            return None
        first_close = candles[0].close
        last_close = candles[-1].close
        return round_percentage((last_close - first_close) / first_close * HUNDRED)
