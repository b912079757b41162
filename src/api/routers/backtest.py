"""
Backtest API endpoints.
"""

import asyncio

from fastapi import APIRouter, Depends, Header, Request

from src.core.enums import RunMode
from src.engine.runner import BacktestJob, BacktestJobManager, BacktestRunner

from ..schemas.api_models import (
    BacktestResponse,
    BacktestStatusResponse,
    BacktestSubmission,
    to_json_safe,
)

router = APIRouter()


def get_runner(request: Request) -> BacktestRunner:
    return request.app.state.runner


def get_job_manager(request: Request) -> BacktestJobManager:
    return request.app.state.job_manager


def _status_response(job: BacktestJob) -> BacktestStatusResponse:
    result = job.result()
    progress = job.progress
    return BacktestStatusResponse(
        backtest_id=job.id,
        status=job.status,
        progress=progress.to_dict() if progress else None,
        result=to_json_safe(result.to_dict()) if result else None,
        error_message=job.error_message,
    )


@router.post("/", response_model=BacktestResponse)
async def submit_backtest(
    submission: BacktestSubmission,
    user_id: str = Header(default="anonymous", alias="X-User-Id"),
    runner: BacktestRunner = Depends(get_runner),
    job_manager: BacktestJobManager = Depends(get_job_manager),
) -> BacktestResponse:
    """Run a quick backtest, or start a full one in the background."""
    request = submission.to_domain()

    if submission.mode == RunMode.QUICK:
        result = await asyncio.to_thread(runner.run_quick, request)
        return BacktestResponse(
            backtest_id=result.run.id,
            status=result.status,
            message=result.error_message or "Backtest completed",
            result=to_json_safe(result.to_dict()),
        )

    job = await job_manager.submit(user_id, request)
    return BacktestResponse(backtest_id=job.id, status=job.status, message="Backtest started")


@router.get("/{backtest_id}", response_model=BacktestStatusResponse)
async def get_backtest(
    backtest_id: str, job_manager: BacktestJobManager = Depends(get_job_manager)
) -> BacktestStatusResponse:
    """Get progress or results of a full backtest."""
    return _status_response(job_manager.get(backtest_id))


@router.delete("/{backtest_id}", response_model=BacktestStatusResponse)
async def cancel_backtest(
    backtest_id: str, job_manager: BacktestJobManager = Depends(get_job_manager)
) -> BacktestStatusResponse:
    """Request cancellation of a full backtest."""
    return _status_response(job_manager.cancel(backtest_id))
