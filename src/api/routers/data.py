"""
Data API endpoints.
"""

from fastapi import APIRouter, Request

from src.core.constants import SUPPORTED_INTERVALS

from ..schemas.api_models import SymbolsResponse

router = APIRouter()


@router.get("/symbols", response_model=SymbolsResponse)
async def get_available_symbols(request: Request) -> SymbolsResponse:
    """List symbols the configured market data source can serve."""
    data_source = request.app.state.data_source
    list_symbols = getattr(data_source, "get_available_symbols", None)
    symbols = list_symbols() if list_symbols is not None else []
    return SymbolsResponse(symbols=symbols, intervals=list(SUPPORTED_INTERVALS))
