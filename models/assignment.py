"""
Cutting pattern and assignment schemas.

A cutting pattern is one coil on one line serving one or more orders.
An assignment is a pattern proposed by an optimization run.
"""

from pydantic import Field
from enum import Enum

from models.base import BaseSchema


class AssignmentStatus(str, Enum):
    """Assignment status values."""
    PROPOSED = "PROPOSED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"


# Status order for transition validation (lower index = earlier in flow)
STATUS_ORDER = {
    AssignmentStatus.PROPOSED: 0,
    AssignmentStatus.CONFIRMED: 1,
    AssignmentStatus.COMPLETED: 2,
}


def is_valid_assignment_transition(current: AssignmentStatus, new: AssignmentStatus) -> bool:
    """
    Check if assignment status transition is valid.

    Rules:
    - Moves one step forward only (PROPOSED -> CONFIRMED -> COMPLETED)
    - COMPLETED is terminal
    """
    if current == AssignmentStatus.COMPLETED:
        return False
    return STATUS_ORDER[new] == STATUS_ORDER[current] + 1


class OrderAllocation(BaseSchema):
    """Weight one pattern allocates to one order."""

    order_id: str = Field(..., description="Order identifier")
    allocated_weight: float = Field(..., ge=0, description="Weight allocated (t)")
    is_partial: bool = Field(
        default=False,
        description="True if the order still needed more weight after this draw"
    )


class CuttingPattern(BaseSchema):
    """Scored pairing of one coil with a set of orders."""

    coil_id: str
    line_id: str
    order_ids: list[str] = Field(..., min_length=1)

    # Scrap and scoring
    side_scrap: float = Field(..., description="Trim loss from width difference")
    end_scrap: float = Field(default=0, ge=0, description="Unused coil length (mm)")
    utilization: float = Field(..., description="Finished length share of material (%)")
    changeover_cost: float = Field(..., description="Fixed setup penalty")
    total_score: float = Field(..., description="Higher is better")

    # Coil usage
    coil_consumption: float = Field(..., description="Coil weight committed (%)")
    coil_balance: float = Field(..., description="100 - coil_consumption")
    allocated_weight: float = Field(..., ge=0, description="Weight drawn from the coil (t)")
    remaining_weight: float = Field(..., description="Weight left on the coil (t)")

    # Breakdown, always one entry per covered order
    is_partial_allocation: bool = Field(default=False)
    order_allocations: list[OrderAllocation] = Field(default_factory=list)


class Assignment(CuttingPattern):
    """Pattern proposed by an optimization run."""

    id: str = Field(..., description="Assignment identifier")
    pass_number: int = Field(..., ge=1, le=3, description="Allocation pass that produced it")
    status: AssignmentStatus = Field(default=AssignmentStatus.PROPOSED)
