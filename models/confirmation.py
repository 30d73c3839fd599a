"""
Confirm/clear request and response schemas.
"""

from pydantic import Field

from models.base import BaseSchema
from models.coil import Coil
from models.order import Order
from models.assignment import Assignment
from models.forecast import RMForecast


class ConfirmRequest(BaseSchema):
    """Assignments to confirm against the current coils and orders."""

    coils: list[Coil] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)


class ConfirmationResult(BaseSchema):
    """New coil, order and assignment values after confirmation."""

    assignments: list[Assignment]
    coils: list[Coil]
    orders: list[Order]
    allocated_weight_by_order: dict[str, float] = Field(default_factory=dict)


class ClearRequest(BaseSchema):
    """Coils to release when a proposal is discarded."""

    coils: list[Coil] = Field(default_factory=list)


class ClearResult(BaseSchema):
    """State after discarding an assignment set."""

    coils: list[Coil]
    assignments: list[Assignment] = Field(default_factory=list)
    forecasts: list[RMForecast] = Field(default_factory=list)
