"""
Pydantic models for validation and serialization.

Engine inputs (coils, orders, lines) are frozen snapshots; everything
a run produces is a plain schema.
"""

from models.base import BaseSchema, SnapshotSchema
from models.product import ProductFamily
from models.line import Line
from models.coil import (
    Coil,
    CoilStatus,
    COIL_TRANSITIONS,
    is_valid_coil_transition,
)
from models.order import Order, OrderStatus
from models.assignment import (
    Assignment,
    AssignmentStatus,
    CuttingPattern,
    OrderAllocation,
    is_valid_assignment_transition,
)
from models.forecast import ForecastOrderDetail, RMForecast
from models.ledger import CapacityLedger
from models.optimization import (
    TraceAction,
    TraceEvent,
    UtilizationBand,
    RunSummary,
    OptimizationRequest,
    OptimizationResult,
    PatternRequest,
    ForecastRequest,
)
from models.usage import (
    CoilUsageStatus,
    CoilUsage,
    CoilOrderShare,
    OrderCoilShare,
    MultiCoilOrder,
    UsageReport,
    UsageRequest,
)
from models.confirmation import (
    ConfirmRequest,
    ConfirmationResult,
    ClearRequest,
    ClearResult,
)

__all__ = [
    # Base
    "BaseSchema",
    "SnapshotSchema",

    # Inventory snapshot
    "ProductFamily",
    "Line",
    "Coil",
    "CoilStatus",
    "COIL_TRANSITIONS",
    "is_valid_coil_transition",
    "Order",
    "OrderStatus",

    # Patterns and assignments
    "Assignment",
    "AssignmentStatus",
    "CuttingPattern",
    "OrderAllocation",
    "is_valid_assignment_transition",

    # Forecasts
    "ForecastOrderDetail",
    "RMForecast",

    # Runs
    "CapacityLedger",
    "TraceAction",
    "TraceEvent",
    "UtilizationBand",
    "RunSummary",
    "OptimizationRequest",
    "OptimizationResult",
    "PatternRequest",
    "ForecastRequest",

    # Coil usage
    "CoilUsageStatus",
    "CoilUsage",
    "CoilOrderShare",
    "OrderCoilShare",
    "MultiCoilOrder",
    "UsageReport",
    "UsageRequest",

    # Confirm / clear
    "ConfirmRequest",
    "ConfirmationResult",
    "ClearRequest",
    "ClearResult",
]
