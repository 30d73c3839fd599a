"""
Optimization run schemas.

Request/response bodies for a run, the typed trace the allocator
emits, and the summary metrics shown on the planning dashboard.
"""

from pydantic import Field
from datetime import datetime
from enum import Enum

from models.base import BaseSchema
from models.line import Line
from models.coil import Coil
from models.order import Order
from models.assignment import Assignment
from models.forecast import RMForecast
from models.ledger import CapacityLedger
from models.usage import UsageReport


class TraceAction(str, Enum):
    """What happened at one step of a run."""
    RUN_STARTED = "RUN_STARTED"
    PASS_STARTED = "PASS_STARTED"
    ORDERS_GROUPED = "ORDERS_GROUPED"
    GROUP_ASSIGNED = "GROUP_ASSIGNED"
    GROUP_UNMATCHED = "GROUP_UNMATCHED"
    ORDER_SKIPPED = "ORDER_SKIPPED"          # Weight not a positive finite number
    COIL_SKIPPED_NO_LINE = "COIL_SKIPPED_NO_LINE"
    COIL_DRAWN = "COIL_DRAWN"
    ORDER_FULFILLED = "ORDER_FULFILLED"
    ORDER_PARTIAL = "ORDER_PARTIAL"
    ORDER_UNMATCHED = "ORDER_UNMATCHED"
    FORECASTS_GENERATED = "FORECASTS_GENERATED"
    RUN_COMPLETED = "RUN_COMPLETED"


class TraceEvent(BaseSchema):
    """One step of the optimization trace."""

    pass_number: int = Field(..., ge=0, le=3, description="0 for run-level events")
    action: TraceAction
    coil_ids: list[str] = Field(default_factory=list)
    order_ids: list[str] = Field(default_factory=list)
    weight: float = Field(default=0, description="Tonnes involved in this step")
    message: str = Field(default="")


class UtilizationBand(str, Enum):
    """Dashboard colour band for average utilization."""
    HIGH = "HIGH"      # >= 95%
    MEDIUM = "MEDIUM"  # >= 80%
    LOW = "LOW"


class RunSummary(BaseSchema):
    """Headline metrics for one run."""

    total_assignments: int = 0
    coils_used: int = 0
    orders_fulfilled: int = 0
    orders_partially_allocated: int = 0
    orders_unfulfilled: int = 0
    total_allocated_weight: float = 0
    total_side_scrap: float = 0
    total_end_scrap: float = 0
    total_scrap: float = 0
    average_utilization: float = 0
    utilization_band: UtilizationBand = UtilizationBand.LOW
    total_recommended_weight: float = 0


class OptimizationRequest(BaseSchema):
    """Snapshot to optimize."""

    coils: list[Coil] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    lines: list[Line] = Field(default_factory=list)


class OptimizationResult(BaseSchema):
    """Everything one run produces."""

    run_id: str
    generated_at: datetime
    assignments: list[Assignment] = Field(default_factory=list)
    forecasts: list[RMForecast] = Field(default_factory=list)
    ledger: CapacityLedger = Field(default_factory=CapacityLedger)
    unfulfilled_order_ids: list[str] = Field(default_factory=list)
    trace: list[TraceEvent] = Field(default_factory=list)
    summary: RunSummary = Field(default_factory=RunSummary)
    usage: UsageReport = Field(default_factory=UsageReport)


class PatternRequest(BaseSchema):
    """Score one coil against a set of orders."""

    coil: Coil
    orders: list[Order] = Field(..., min_length=1)
    lines: list[Line] = Field(default_factory=list)


class ForecastRequest(BaseSchema):
    """Orders to turn into purchase recommendations."""

    orders: list[Order] = Field(default_factory=list)
