"""
Optimization API routes.

Stateless: every request carries the snapshot it works on and gets new
values back. Persisting coils, orders and assignments is up to the
caller.
"""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.assignment import CuttingPattern
from models.confirmation import (
    ClearRequest,
    ClearResult,
    ConfirmationResult,
    ConfirmRequest,
)
from models.forecast import RMForecast
from models.usage import UsageReport, UsageRequest
from models.optimization import (
    ForecastRequest,
    OptimizationRequest,
    OptimizationResult,
    PatternRequest,
)
from services.confirmation_service import get_confirmation_service
from services.forecast_service import get_forecast_service
from services.optimization_service import get_optimization_service
from services.pattern_service import get_pattern_service
from services.usage_service import get_usage_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/optimization", tags=["Optimization"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/run", response_model=OptimizationResult)
async def run_optimization(request: OptimizationRequest):
    """
    Run the three-pass allocation over a coil/order/line snapshot.

    Returns PROPOSED assignments, RM forecasts for whatever could not be
    served, the capacity ledger, a step-by-step trace and summary metrics.
    """
    try:
        service = get_optimization_service()
        return service.run(request.coils, request.orders, request.lines)

    except Exception as e:
        return handle_error(e)


@router.post("/pattern", response_model=Optional[CuttingPattern])
async def score_pattern(request: PatternRequest):
    """
    Score one coil against a set of orders.

    Returns null when the orders don't fit the coil, no line can run
    it, or the orders outweigh it.
    """
    try:
        service = get_pattern_service()
        return service.score(request.coil, request.orders, request.lines)

    except Exception as e:
        return handle_error(e)


@router.post("/forecasts", response_model=list[RMForecast])
async def generate_forecasts(request: ForecastRequest):
    """Raw-material recommendations treating every given order as unfulfilled."""
    try:
        service = get_forecast_service()
        return service.generate(request.orders)

    except Exception as e:
        return handle_error(e)


@router.post("/confirm", response_model=ConfirmationResult)
async def confirm_assignments(request: ConfirmRequest):
    """
    Confirm a proposed assignment set.

    Coils used by the assignments become USED; orders become COMPLETED,
    ASSIGNED or PENDING by how much of their weight is allocated.
    """
    try:
        service = get_confirmation_service()
        return service.confirm(request.coils, request.orders, request.assignments)

    except Exception as e:
        return handle_error(e)


@router.post("/clear", response_model=ClearResult)
async def clear_assignments(request: ClearRequest):
    """Discard assignments and forecasts; release every coil."""
    try:
        service = get_confirmation_service()
        return service.clear(request.coils)

    except Exception as e:
        return handle_error(e)


@router.post("/usage", response_model=UsageReport)
async def coil_usage(request: UsageRequest):
    """
    Per-coil consumption for a proposed or confirmed assignment set.

    Coils left with less than the full-use threshold are reported as
    fully used, their remainder as scrap.
    """
    try:
        service = get_usage_service()
        return service.report(request.coils, request.orders, request.assignments)

    except Exception as e:
        return handle_error(e)
