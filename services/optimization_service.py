"""
Optimization service — One full planning run.

Validates the snapshot, runs the three allocation passes, forecasts
raw material for what is left, and rolls everything up into a result
with a typed trace, summary metrics and a per-coil usage report.

A run only reads its inputs and returns new values. Callers running
several optimizations over the same inventory must serialize them.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import uuid4

import structlog

from exceptions import DuplicateEntityError
from models.assignment import Assignment
from models.coil import Coil
from models.forecast import RMForecast
from models.line import Line
from models.optimization import (
    OptimizationResult,
    RunSummary,
    TraceAction,
    TraceEvent,
    UtilizationBand,
)
from models.order import Order
from services.allocation_service import (
    AllocationOutcome,
    AllocationService,
    get_allocation_service,
)
from services.forecast_service import ForecastService, get_forecast_service
from services.usage_service import UsageService, get_usage_service

logger = structlog.get_logger(__name__)


# Utilization bands
HIGH_UTILIZATION = 95.0
MEDIUM_UTILIZATION = 80.0


def utilization_band(utilization: float) -> UtilizationBand:
    """Map a utilization percentage to its dashboard band."""
    if utilization >= HIGH_UTILIZATION:
        return UtilizationBand.HIGH
    if utilization >= MEDIUM_UTILIZATION:
        return UtilizationBand.MEDIUM
    return UtilizationBand.LOW


class OptimizationService:
    """Orchestrates allocation and forecasting for one snapshot."""

    def __init__(
        self,
        allocation_service: Optional[AllocationService] = None,
        forecast_service: Optional[ForecastService] = None,
        usage_service: Optional[UsageService] = None,
    ):
        self.allocation_service = allocation_service or get_allocation_service()
        self.forecast_service = forecast_service or get_forecast_service()
        self.usage_service = usage_service or get_usage_service()

    def run(
        self,
        coils: Sequence[Coil],
        orders: Sequence[Order],
        lines: Sequence[Line],
        run_id: Optional[str] = None,
    ) -> OptimizationResult:
        """
        Run the optimization.

        Args:
            coils: Coil snapshot
            orders: Order snapshot
            lines: Processing lines
            run_id: Identifier for this run (generated if not given)

        Returns:
            OptimizationResult with PROPOSED assignments and forecasts

        Raises:
            DuplicateEntityError: If an id repeats within coils, orders or lines
        """
        self._check_unique("Coil", [coil.id for coil in coils])
        self._check_unique("Order", [order.id for order in orders])
        self._check_unique("Line", [line.id for line in lines])

        run_id = run_id or uuid4().hex[:8]

        logger.info(
            "optimization_started",
            run_id=run_id,
            coils=len(coils),
            orders=len(orders),
            lines=len(lines),
        )

        trace = [TraceEvent(
            pass_number=0,
            action=TraceAction.RUN_STARTED,
            message=f"Starting optimization with {len(coils)} coils and {len(orders)} orders",
        )]

        outcome = self.allocation_service.allocate(coils, orders, lines)
        trace.extend(outcome.events)

        assignments: list[Assignment] = []
        for pass_outcome in outcome.passes:
            trace.extend(pass_outcome.events)
            for pattern in pass_outcome.patterns:
                assignments.append(Assignment(
                    id=f"{run_id}-A{len(assignments) + 1:03d}",
                    pass_number=pass_outcome.pass_number,
                    **pattern.model_dump(),
                ))

        forecasts = self.forecast_service.generate(outcome.unfulfilled, id_prefix=run_id)
        if outcome.unfulfilled:
            trace.append(TraceEvent(
                pass_number=0,
                action=TraceAction.FORECASTS_GENERATED,
                order_ids=[order.id for order in outcome.unfulfilled],
                weight=sum(forecast.recommended_weight for forecast in forecasts),
                message=f"Generated {len(forecasts)} RM forecasts for unfulfilled orders",
            ))

        summary = self.summarize(assignments, forecasts, outcome, orders)
        usage = self.usage_service.report(coils, orders, assignments)

        trace.append(TraceEvent(
            pass_number=0,
            action=TraceAction.RUN_COMPLETED,
            order_ids=[order.id for order in outcome.unfulfilled],
            weight=summary.total_allocated_weight,
            message=(
                f"Optimization complete: {len(assignments)} assignments created, "
                f"{len(outcome.unfulfilled)} orders unfulfilled"
            ),
        ))

        logger.info(
            "optimization_complete",
            run_id=run_id,
            assignments=summary.total_assignments,
            fulfilled=summary.orders_fulfilled,
            unfulfilled=summary.orders_unfulfilled,
            forecasts=len(forecasts),
            average_utilization=round(summary.average_utilization, 2),
        )

        return OptimizationResult(
            run_id=run_id,
            generated_at=datetime.now(timezone.utc),
            assignments=assignments,
            forecasts=forecasts,
            ledger=outcome.ledger,
            unfulfilled_order_ids=[order.id for order in outcome.unfulfilled],
            trace=trace,
            summary=summary,
            usage=usage,
        )

    def summarize(
        self,
        assignments: list[Assignment],
        forecasts: list[RMForecast],
        outcome: AllocationOutcome,
        orders: Sequence[Order],
    ) -> RunSummary:
        """Headline metrics for the planning dashboard."""
        unfulfilled_ids = {order.id for order in outcome.unfulfilled}
        partially_allocated = sum(
            1 for order in orders
            if order.id in unfulfilled_ids and outcome.ledger.allocated(order.id) > 0
        )

        total_side_scrap = sum(a.side_scrap for a in assignments)
        total_end_scrap = sum(a.end_scrap for a in assignments)
        average_utilization = (
            sum(a.utilization for a in assignments) / len(assignments)
            if assignments else 0.0
        )

        return RunSummary(
            total_assignments=len(assignments),
            coils_used=len({a.coil_id for a in assignments}),
            orders_fulfilled=len(orders) - len(unfulfilled_ids),
            orders_partially_allocated=partially_allocated,
            orders_unfulfilled=len(unfulfilled_ids),
            total_allocated_weight=sum(a.allocated_weight for a in assignments),
            total_side_scrap=total_side_scrap,
            total_end_scrap=total_end_scrap,
            total_scrap=total_side_scrap + total_end_scrap,
            average_utilization=average_utilization,
            utilization_band=utilization_band(average_utilization),
            total_recommended_weight=sum(f.recommended_weight for f in forecasts),
        )

    def _check_unique(self, resource: str, ids: list[str]) -> None:
        seen: set[str] = set()
        for entity_id in ids:
            if entity_id in seen:
                raise DuplicateEntityError(resource, entity_id)
            seen.add(entity_id)


# Singleton
_optimization_service: Optional[OptimizationService] = None


def get_optimization_service() -> OptimizationService:
    """Get the singleton optimization service instance."""
    global _optimization_service
    if _optimization_service is None:
        _optimization_service = OptimizationService()
    return _optimization_service
