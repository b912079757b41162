#!/usr/bin/env python3
"""
Backtest Runner

Runs a full AI-signal backtest over CSV market data and prints a summary.
Candles are read from <data-dir>/<SYMBOL>/<interval>.csv.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger
from tqdm import tqdm

from src.core.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_MAX_OPEN_POSITIONS,
    DEFAULT_RISK_PER_TRADE,
    DEFAULT_STARTING_CAPITAL,
    DEFAULT_STOP_LOSS_PERCENT,
    DEFAULT_TAKE_PROFIT_PERCENT,
    SUPPORTED_INTERVALS,
)
from src.core.exceptions.backtest import BacktestException
from src.core.models.backtest import (
    BacktestProgress,
    BacktestRequest,
    BacktestResult,
    StrategyParameters,
)
from src.engine.runner import BacktestRunner
from src.infrastructure.data import CSVMarketDataSource
from src.infrastructure.signals import ModelSignalSource, MomentumModel


def setup_logging(debug: bool = False):
    """Configure logging with loguru."""
    logger.remove()

    level = "DEBUG" if debug else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )


async def run_with_progress(runner: BacktestRunner, request: BacktestRequest) -> BacktestResult:
    """Start a full backtest and mirror its progress in a tqdm bar."""
    with tqdm(desc=f"Backtesting {request.symbol}", unit="candle") as progress_bar:

        def on_progress(progress: BacktestProgress) -> None:
            progress_bar.total = progress.total
            progress_bar.n = progress.processed
            progress_bar.set_postfix(trades=progress.total_trades, value=progress.portfolio_value)
            progress_bar.refresh()

        job = await runner.start(request, progress_callback=on_progress)
        try:
            return await job.wait()
        except asyncio.CancelledError:
            job.cancel()
            raise


def print_summary(result: BacktestResult) -> None:
    run = result.run
    logger.info(f"Run {run.id}: {result.status.value}")
    if result.error_message:
        logger.error(f"Reason: {result.error_message}")
        return

    metrics = result.performance
    logger.info(f"Final capital: {run.final_capital} (started with {run.starting_capital})")
    logger.info(f"Trades: {metrics.total_trades}, win rate {metrics.win_rate}%")
    logger.info(
        f"Return {metrics.total_return}% (annualized {metrics.annualized_return}%), "
        f"benchmark {result.benchmark_return}%"
    )
    logger.info(
        f"Profit factor {metrics.profit_factor}, max drawdown {metrics.max_drawdown}%, "
        f"sharpe {metrics.sharpe_ratio}"
    )


def main():
    parser = argparse.ArgumentParser(
        description="Run an AI-signal backtest over CSV market data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_backtest.py --symbol BTC --start 2024-01-01 --end 2024-03-31
  python run_backtest.py --symbol ETH --start 2024-01-01 --end 2024-06-30 --interval 4h --stop-loss 3
  python run_backtest.py --symbol BTC --start 2024-01-01 --end 2024-02-01 --output result.json
        """,
    )

    parser.add_argument("--symbol", type=str, required=True, help="Coin symbol (e.g., BTC)")
    parser.add_argument("--start", type=str, required=True, help="Start date (ISO-8601)")
    parser.add_argument("--end", type=str, required=True, help="End date (ISO-8601)")
    parser.add_argument(
        "--capital",
        type=float,
        default=DEFAULT_STARTING_CAPITAL,
        help=f"Starting capital (default: {DEFAULT_STARTING_CAPITAL})",
    )
    parser.add_argument(
        "--interval", choices=SUPPORTED_INTERVALS, default="1h", help="Candle interval"
    )
    parser.add_argument("--stop-loss", type=float, default=DEFAULT_STOP_LOSS_PERCENT)
    parser.add_argument("--take-profit", type=float, default=DEFAULT_TAKE_PROFIT_PERCENT)
    parser.add_argument("--confidence", type=float, default=DEFAULT_CONFIDENCE_THRESHOLD)
    parser.add_argument("--max-positions", type=int, default=DEFAULT_MAX_OPEN_POSITIONS)
    parser.add_argument("--risk-per-trade", type=float, default=DEFAULT_RISK_PER_TRADE)
    parser.add_argument(
        "--exit-on-bearish",
        action="store_true",
        help="Close open positions on a confident down signal",
    )
    parser.add_argument(
        "--data-dir", type=str, default="data", help="Market data directory (default: data)"
    )
    parser.add_argument("--output", type=str, help="Write the full result as JSON to this file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    setup_logging(args.debug)

    request = BacktestRequest(
        symbol=args.symbol,
        start=args.start,
        end=args.end,
        starting_capital=args.capital,
        parameters=StrategyParameters(
            stop_loss_percent=args.stop_loss,
            take_profit_percent=args.take_profit,
            confidence_threshold=args.confidence,
            max_open_positions=args.max_positions,
            risk_per_trade=args.risk_per_trade,
            interval=args.interval,
            exit_on_bearish_signal=args.exit_on_bearish,
        ),
    )

    try:
        runner = BacktestRunner(
            CSVMarketDataSource(args.data_dir), lambda: ModelSignalSource(MomentumModel())
        )
        result = asyncio.run(run_with_progress(runner, request))
    except BacktestException as e:
        logger.error(f"Backtest rejected: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Backtest failed: {e}")
        return 1

    print_summary(result)

    if args.output:
        Path(args.output).write_text(json.dumps(result.to_dict(), indent=2))
        logger.success(f"Result written to {args.output}")

    return 0 if result.error_message is None else 1


if __name__ == "__main__":
    sys.exit(main())
