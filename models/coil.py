"""
Coil schemas and status transitions.

Coils are owned by inventory. The engine only reads them; the
confirm/clear contracts move them between statuses.
"""

from pydantic import Field, model_validator
from enum import Enum
from typing import Any

from models.base import SnapshotSchema
from models.product import ProductFamily
from utils.steel_utils import calculate_coil_length


class CoilStatus(str, Enum):
    """
    Coil status values.

    ALLOCATED is set by inventory when a coil is reserved outside the
    engine. Runs treat it like any other status; confirm moves it to
    USED and clear moves it back to AVAILABLE.
    """
    AVAILABLE = "AVAILABLE"
    ALLOCATED = "ALLOCATED"
    USED = "USED"


# Allowed target statuses per current status
COIL_TRANSITIONS = {
    CoilStatus.AVAILABLE: {CoilStatus.ALLOCATED, CoilStatus.USED},
    CoilStatus.ALLOCATED: {CoilStatus.USED, CoilStatus.AVAILABLE},
    CoilStatus.USED: {CoilStatus.USED, CoilStatus.AVAILABLE},
}


def is_valid_coil_transition(current: CoilStatus, new: CoilStatus) -> bool:
    """
    Check if a coil status transition is valid.

    Rules:
    - Confirming moves any coil to USED (re-confirming a USED coil is a no-op)
    - Clearing moves any coil back to AVAILABLE
    - AVAILABLE -> AVAILABLE is meaningless and rejected
    """
    return new in COIL_TRANSITIONS[current]


class Coil(SnapshotSchema):
    """A raw-material coil in inventory."""

    id: str = Field(..., min_length=1, description="Coil identifier")
    coil_code: str = Field(default="", description="Label printed on the coil")
    product: ProductFamily = Field(..., description="Product family")
    width: float = Field(..., ge=0, description="Width (mm)")
    thickness: float = Field(..., ge=0, description="Thickness (mm)")
    length: float = Field(default=0, ge=0, description="Length (mm), derived from weight if 0")
    weight: float = Field(..., gt=0, description="Weight (t)")
    grade: str = Field(..., description="Material grade, e.g. CRCA")
    status: CoilStatus = Field(default=CoilStatus.AVAILABLE, description="Inventory status")

    @model_validator(mode='before')
    @classmethod
    def derive_length(cls, data: Any) -> Any:
        """Fill a missing or zero length from weight, width and thickness."""
        if not isinstance(data, dict) or data.get("length"):
            return data
        try:
            weight = float(data["weight"])
            width = float(data["width"])
            thickness = float(data["thickness"])
        except (KeyError, TypeError, ValueError):
            # Field validation reports the bad input
            return data
        return {**data, "length": calculate_coil_length(weight, width, thickness)}

    @property
    def label(self) -> str:
        """Human-facing identifier for logs."""
        return self.coil_code or self.id
