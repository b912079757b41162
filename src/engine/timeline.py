"""
Timeline builder.

Folds a run's trades and candles into one equity point per calendar day.
"""

from collections import defaultdict
from collections.abc import Sequence
from datetime import date

import pandas as pd

from src.core.models.market import Candle
from src.core.models.timeline import TimelinePoint
from src.core.models.trade import Trade
from src.core.models.trading_run import TradingRun
from src.core.protocols import Clock
from src.core.types.financial import ZERO


class TimelineBuilder:
    """Builds the daily equity curve of a run."""

    def __init__(self, clock: Clock):
        self._clock = clock

    def build(
        self,
        run: TradingRun,
        trades: Sequence[Trade],
        candles: Sequence[Candle] | None = None,
    ) -> list[TimelinePoint]:
        """
        Build one point per day from session start to session end, inclusive.

        A day's value is the balance after its last trade, carried forward
        when the day has no trades. The price is the last close on or
        before the day, 0.0 before the first candle. Runs that have not
        ended are drawn up to the clock's current date.

        Returns:
            Non-empty list of TimelinePoints in date order
        """
        start_day = run.session_start.date()
        end_day = (run.session_end or self._clock.now()).date()
        end_day = max(end_day, start_day)

        trades_by_day: dict[date, list[Trade]] = defaultdict(list)
        for trade in trades:
            trades_by_day[trade.execution_time.date()].append(trade)

        closes_by_day: dict[date, float] = {}
        for candle in sorted(candles or [], key=lambda c: c.timestamp):
            closes_by_day[candle.timestamp.date()] = candle.close

        # Closes before the window still seed the reference price
        price = ZERO
        for day in sorted(closes_by_day):
            if day >= start_day:
                break
            price = closes_by_day[day]

        points = []
        portfolio_value = run.starting_capital
        for timestamp in pd.date_range(start_day, end_day, freq="D"):
            day = timestamp.date()
            day_trades = trades_by_day.get(day, [])
            if day_trades:
                portfolio_value = day_trades[-1].portfolio_value_after
            price = closes_by_day.get(day, price)
            points.append(
                TimelinePoint(
                    date=day,
                    portfolio_value=portfolio_value,
                    price=price,
                    trades=list(day_trades),
                )
            )
        return points
