"""
Coil usage report schemas.

How much of each coil an assignment set consumes, and which orders
are spread across more than one coil.
"""

from pydantic import Field
from enum import Enum

from models.base import BaseSchema
from models.coil import Coil
from models.order import Order
from models.assignment import Assignment


class CoilUsageStatus(str, Enum):
    """Usage state of one coil."""
    UNUSED = "UNUSED"
    PARTIAL = "PARTIAL"
    FULLY_USED = "FULLY_USED"  # Balance under the full-use threshold


class CoilOrderShare(BaseSchema):
    """Weight one coil gives to one order."""

    order_id: str
    allocated_weight: float = Field(..., ge=0)


class OrderCoilShare(BaseSchema):
    """Weight one order takes from one coil."""

    coil_id: str
    allocated_weight: float = Field(..., ge=0)


class CoilUsage(BaseSchema):
    """
    Consumption of one coil.

    For a FULLY_USED coil the small remainder is reported as scrap and
    the balance is 0.
    """

    coil_id: str
    coil_code: str = ""
    weight: float = Field(..., ge=0, description="Coil weight (t)")
    consumed_weight: float = Field(..., ge=0, description="Capped at coil weight (t)")
    balance_weight: float = Field(..., ge=0, description="Reusable remainder (t)")
    scrap_weight: float = Field(default=0, ge=0, description="Remainder too small to reuse (t)")
    consumed_percentage: float = Field(..., ge=0, le=100)
    balance_percentage: float = Field(..., ge=0, le=100)
    scrap_percentage: float = Field(default=0, ge=0, le=100)
    status: CoilUsageStatus
    orders: list[CoilOrderShare] = Field(default_factory=list)


class MultiCoilOrder(BaseSchema):
    """An order served by more than one coil."""

    order_id: str
    order_code: str = ""
    order_weight: float = Field(..., ge=0)
    allocated_weight: float = Field(..., ge=0)
    unfulfilled_weight: float = Field(..., ge=0)
    coils: list[OrderCoilShare] = Field(default_factory=list)


class UsageReport(BaseSchema):
    """Coil usage for one assignment set."""

    coils: list[CoilUsage] = Field(default_factory=list)
    multi_coil_orders: list[MultiCoilOrder] = Field(default_factory=list)
    unused_coils: int = 0
    partial_coils: int = 0
    fully_used_coils: int = 0
    total_balance_weight: float = 0
    total_scrap_weight: float = 0


class UsageRequest(BaseSchema):
    """Assignment set to report on, proposed or confirmed."""

    coils: list[Coil] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)
