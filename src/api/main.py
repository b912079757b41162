"""
FastAPI main application for crypto backtesting platform.
"""

import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from src.core.exceptions.backtest import (
    ConcurrencyLimitError,
    JobNotFoundError,
    ValidationError,
)
from src.core.interfaces.data import IMarketDataSource
from src.engine.runner import BacktestJobManager, BacktestRunner
from src.infrastructure.data import CSVMarketDataSource, InMemoryMarketDataSource
from src.infrastructure.results import InMemoryResultSink
from src.infrastructure.signals import ModelSignalSource, MomentumModel

from .routers import backtest, data
from .schemas.api_models import ErrorResponse

DATA_DIRECTORY_ENV = "BACKTEST_DATA_DIR"


def _default_data_source() -> IMarketDataSource:
    data_dir = Path(os.environ.get(DATA_DIRECTORY_ENV, "data"))
    if data_dir.is_dir():
        return CSVMarketDataSource(data_dir)
    logger.warning(f"Data directory {data_dir} not found, serving no market data")
    return InMemoryMarketDataSource()


def _error(status_code: int, error: str, exc: Exception, field: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=str(exc), field=field)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(
    runner: BacktestRunner | None = None,
    job_manager: BacktestJobManager | None = None,
    data_source: IMarketDataSource | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        runner: Backtest runner, built over ``data_source`` when omitted
        job_manager: Admission control for full runs, built over ``runner``
        data_source: Market data, CSV files under $BACKTEST_DATA_DIR by default
    """
    data_source = data_source or _default_data_source()
    runner = runner or BacktestRunner(
        data_source,
        lambda: ModelSignalSource(MomentumModel()),
        result_sink=InMemoryResultSink(),
    )

    app = FastAPI(
        title="Crypto Backtesting API",
        version="1.0.0",
        description="API for AI-signal crypto strategy backtesting",
    )
    app.state.data_source = data_source
    app.state.runner = runner
    app.state.job_manager = job_manager or BacktestJobManager(runner)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:8080"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-User-Id"],
    )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, "validation_error", exc, exc.field)

    @app.exception_handler(ConcurrencyLimitError)
    async def handle_concurrency_limit(
        request: Request, exc: ConcurrencyLimitError
    ) -> JSONResponse:
        return _error(429, "too_many_backtests", exc)

    @app.exception_handler(JobNotFoundError)
    async def handle_job_not_found(request: Request, exc: JobNotFoundError) -> JSONResponse:
        return _error(404, "not_found", exc)

    app.include_router(backtest.router, prefix="/api/backtest", tags=["backtest"])
    app.include_router(data.router, prefix="/api/data", tags=["data"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {"message": "Crypto Backtesting API", "version": "1.0.0", "status": "running"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
