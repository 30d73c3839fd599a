"""
Order (demand record) schemas.
"""

from pydantic import Field, model_validator
from typing import Any, Optional
from enum import Enum
from datetime import date

from models.base import SnapshotSchema
from models.product import ProductFamily
from utils.steel_utils import calculate_order_weight


class OrderStatus(str, Enum):
    """Order status values, derived from allocated weight on confirm."""
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"


class Order(SnapshotSchema):
    """
    Sheets to be cut from coil stock.

    `weight` is normally derived upstream from the sheet dimensions and
    is taken as-is, so it may be NaN, zero or negative. The allocator
    skips such orders and the forecast generator counts them as 0 t.
    Only a missing weight is computed here from the dimensions.
    """

    id: str = Field(..., min_length=1, description="Order identifier")
    order_code: str = Field(default="", description="Customer-facing order number")
    product: ProductFamily = Field(..., description="Product family")
    width: float = Field(..., ge=0, description="Sheet width (mm)")
    length: float = Field(..., ge=0, description="Sheet length (mm)")
    thickness: float = Field(..., ge=0, description="Sheet thickness (mm)")
    quantity: int = Field(default=1, ge=0, description="Number of sheets")
    grade: str = Field(..., description="Material grade, e.g. CRCA")
    coil_packet_weight: float = Field(default=0, ge=0, description="Packet weight (t)")
    weight: float = Field(..., description="Total order weight (t)")
    priority: int = Field(default=1, ge=0, description="Lower number = higher priority")
    due_date: Optional[date] = Field(None, description="Requested delivery date")
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="Fulfilment status")

    @model_validator(mode='before')
    @classmethod
    def derive_weight(cls, data: Any) -> Any:
        """Fill a missing weight from width × length × thickness × quantity."""
        if not isinstance(data, dict) or data.get("weight") is not None:
            return data
        try:
            weight = calculate_order_weight(
                float(data["width"]),
                float(data["length"]),
                float(data["thickness"]),
                int(data.get("quantity", 1)),
            )
        except (KeyError, TypeError, ValueError):
            # Field validation reports the bad input
            return data
        return {**data, "weight": weight}

    @property
    def label(self) -> str:
        """Human-facing identifier for logs."""
        return self.order_code or self.id
