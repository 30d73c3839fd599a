"""
Processing line schema.

A line's operating envelope decides which coils it can run.
"""

from pydantic import Field, model_validator

from models.base import SnapshotSchema


class Line(SnapshotSchema):
    """Cut-to-length line and its width/thickness/weight envelope."""

    id: str = Field(..., min_length=1, description="Line identifier")
    name: str = Field(default="", description="Display name")
    min_width: float = Field(..., ge=0, description="Narrowest coil accepted (mm)")
    max_width: float = Field(..., ge=0, description="Widest coil accepted (mm)")
    max_thickness: float = Field(..., ge=0, description="Thickest coil accepted (mm)")
    max_weight: float = Field(..., ge=0, description="Heaviest coil accepted (t)")
    speed_mpm: float = Field(default=0, ge=0, description="Throughput (m/min)")
    cost: float = Field(default=0, ge=0, description="Processing cost per tonne")

    @model_validator(mode="after")
    def width_range_ordered(self) -> "Line":
        """min_width cannot exceed max_width."""
        if self.min_width > self.max_width:
            raise ValueError("min_width cannot exceed max_width")
        return self
