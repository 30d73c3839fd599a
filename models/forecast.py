"""
Raw-material forecast schemas.

Purchase recommendations sized to cover demand no coil could serve.
"""

from pydantic import Field

from models.base import BaseSchema


class ForecastOrderDetail(BaseSchema):
    """Requirement of one unfulfilled order."""

    order_id: str
    required_width: float = Field(..., ge=0)
    required_length: float = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    estimated_weight: float = Field(..., ge=0, description="Order weight after sanity clamp (t)")


class RMForecast(BaseSchema):
    """Recommended coil purchase for one (thickness, grade) spec."""

    id: str
    recommended_width: float = Field(..., ge=0, description="Widest order + trim margin (mm)")
    recommended_thickness: float = Field(..., ge=0, description="Thickness (mm)")
    recommended_weight: float = Field(..., ge=0, description="Buffered aggregate weight (t)")
    grade: str
    unfulfilled: list[str] = Field(default_factory=list, description="Order ids covered")
    quantity: int = Field(..., ge=0, description="Number of orders covered")
    order_details: list[ForecastOrderDetail] = Field(default_factory=list)
