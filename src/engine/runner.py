"""
Backtest orchestration.

BacktestRunner wires validation, simulation, timeline and analytics into
quick (synchronous) and full (background, cancellable) runs.
BacktestJobManager admits full runs per user and keeps track of them.
"""

import asyncio
import uuid
from datetime import UTC, datetime

from cachetools import LRUCache
from loguru import logger

from src.core.constants import (
    DEFAULT_PROGRESS_INTERVAL,
    MAX_CONCURRENT_RUNS_PER_USER,
    MAX_STARTING_CAPITAL,
)
from src.core.enums import RunStatus
from src.core.exceptions.backtest import ConcurrencyLimitError, JobNotFoundError
from src.core.interfaces.data import IMarketDataSource, IResultSink
from src.core.models.backtest import BacktestProgress, BacktestRequest, BacktestResult
from src.core.models.trade import FeeSchedule
from src.core.protocols import Clock, ProgressCallback, SignalSourceFactory
from src.core.utils.clock import SystemClock
from src.core.utils.decorators import log_operation

from .performance import PerformanceAnalytics
from .request_validator import RequestValidator
from .simulation import (
    CancellationToken,
    SimulationContext,
    SimulationDriver,
    unexpected_error_message,
)
from .timeline import TimelineBuilder
from .trade_execution import TradeExecutionEngine


class BacktestJob:
    """
    Handle on a full backtest running in a worker thread.

    ``wait()`` resolves once with the result; progress is updated from the
    worker as candles are processed.
    """

    def __init__(self, job_id: str, request: BacktestRequest, user_id: str | None = None):
        self.id = job_id
        self.request = request
        self.user_id = user_id
        self.token = CancellationToken()
        self.created_at = datetime.now(UTC)
        self._progress: BacktestProgress | None = None
        self._task: asyncio.Task[BacktestResult] | None = None

    @property
    def progress(self) -> BacktestProgress | None:
        """Latest progress snapshot, None before the first report."""
        return self._progress

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def status(self) -> RunStatus:
        if self._task is None:
            return RunStatus.IDLE
        if not self._task.done():
            return RunStatus.RUNNING
        if self._task.cancelled() or self._task.exception() is not None:
            return RunStatus.FAILED
        return self._task.result().status

    def result(self) -> BacktestResult | None:
        """The result once the job finished successfully, otherwise None."""
        if not self.done or self._task.cancelled() or self._task.exception() is not None:
            return None
        return self._task.result()

    @property
    def error_message(self) -> str | None:
        """Reason a finished job failed, None while running or on success."""
        if not self.done:
            return None
        if self._task.cancelled():
            return "Backtest task was cancelled"
        error = self._task.exception()
        if error is not None:
            return unexpected_error_message(error)
        return self._task.result().error_message

    def cancel(self) -> None:
        """Ask the simulation to stop at the next candle."""
        logger.info(f"Cancellation requested for backtest {self.id}")
        self.token.cancel()

    async def wait(self) -> BacktestResult:
        """Wait for the job to finish and return its result."""
        if self._task is None:
            raise RuntimeError(f"Backtest {self.id} was never started")
        return await asyncio.shield(self._task)

    def _report(self, progress: BacktestProgress) -> None:
        self._progress = progress


class BacktestRunner:
    """
    Entry point for quick and full backtests.

    Args:
        data_source: Market data collaborator
        signal_source_factory: Builds a fresh signal source for each run
        clock: Time source for validation and open-ended timelines
        fee_schedule: Exchange fees, defaults to FeeSchedule()
        result_sink: Optional persistence for finished runs
        progress_interval: Candles between progress reports
        max_starting_capital: Ceiling enforced by the request validator
    """

    def __init__(
        self,
        data_source: IMarketDataSource,
        signal_source_factory: SignalSourceFactory,
        clock: Clock | None = None,
        fee_schedule: FeeSchedule | None = None,
        result_sink: IResultSink | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        max_starting_capital: float = MAX_STARTING_CAPITAL,
    ):
        self._clock = clock or SystemClock()
        self._validator = RequestValidator(self._clock, max_starting_capital)
        self._driver = SimulationDriver(
            data_source,
            signal_source_factory,
            execution_engine=TradeExecutionEngine(fee_schedule),
            analytics=PerformanceAnalytics(),
            progress_interval=progress_interval,
        )
        self._timeline_builder = TimelineBuilder(self._clock)
        self._result_sink = result_sink

    @log_operation
    def run_quick(self, request: BacktestRequest) -> BacktestResult:
        """
        Validate and simulate a request synchronously.

        Raises:
            ValidationError: If the request is rejected
        """
        self._validator.validate(request)
        context = self._driver.run(request)
        return self._build_result(context)

    async def start(
        self,
        request: BacktestRequest,
        progress_callback: ProgressCallback | None = None,
        user_id: str | None = None,
    ) -> BacktestJob:
        """
        Validate a request and start it in a worker thread.

        ``progress_callback`` is invoked from the worker thread.

        Raises:
            ValidationError: If the request is rejected
        """
        self._validator.validate(request)
        job = BacktestJob(str(uuid.uuid4()), request, user_id=user_id)
        job._task = asyncio.create_task(asyncio.to_thread(self._execute, job, progress_callback))
        logger.info(f"Backtest {job.id} scheduled for {request.symbol}")
        return job

    def _execute(
        self, job: BacktestJob, progress_callback: ProgressCallback | None
    ) -> BacktestResult:
        def on_progress(progress: BacktestProgress) -> None:
            job._report(progress)
            if progress_callback is not None:
                progress_callback(progress)

        context = self._driver.run(
            job.request, token=job.token, progress_callback=on_progress, run_id=job.id
        )
        return self._build_result(context)

    def _build_result(self, context: SimulationContext) -> BacktestResult:
        run = context.run
        timeline = []
        if run.status != RunStatus.FAILED:
            timeline = self._timeline_builder.build(
                run, context.trades, context.candles[: context.processed]
            )

        if self._result_sink is not None:
            self._result_sink.persist(run, list(context.trades))

        performance = context.performance
        return BacktestResult(
            run=run,
            trades=list(context.trades),
            timeline=timeline,
            performance=performance,
            status=run.status,
            error_message=context.error_message,
            benchmark_return=performance.benchmark_return if performance else None,
        )


class BacktestJobManager:
    """
    Admits full backtests and looks them up by id.

    A user may have at most ``max_concurrent_per_user`` unfinished jobs.
    Finished jobs stay available until they fall out of the history cache.
    """

    def __init__(
        self,
        runner: BacktestRunner,
        max_concurrent_per_user: int = MAX_CONCURRENT_RUNS_PER_USER,
        history_size: int = 1000,
    ):
        self._runner = runner
        self._max_concurrent_per_user = max_concurrent_per_user
        self._jobs: LRUCache[str, BacktestJob] = LRUCache(maxsize=history_size)

    async def submit(
        self,
        user_id: str,
        request: BacktestRequest,
        progress_callback: ProgressCallback | None = None,
    ) -> BacktestJob:
        """
        Start a full backtest for ``user_id``.

        Raises:
            ConcurrencyLimitError: If the user is at the cap
            ValidationError: If the request is rejected
        """
        active = self.active_jobs(user_id)
        if len(active) >= self._max_concurrent_per_user:
            logger.warning(f"User {user_id} hit the limit of {len(active)} active backtests")
            raise ConcurrencyLimitError(user_id, self._max_concurrent_per_user)

        job = await self._runner.start(request, progress_callback, user_id=user_id)
        self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> BacktestJob:
        """
        Look up a job.

        Raises:
            JobNotFoundError: If the id is unknown
        """
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def cancel(self, job_id: str) -> BacktestJob:
        """Request cancellation of a job and return it."""
        job = self.get(job_id)
        job.cancel()
        return job

    def active_jobs(self, user_id: str) -> list[BacktestJob]:
        """Unfinished jobs of ``user_id``."""
        return [job for job in self._jobs.values() if job.user_id == user_id and not job.done]
