"""
Steel geometry and weight helpers.

Units follow the shop floor: dimensions in mm, weights in tonnes.
"""

import math

STEEL_DENSITY = 7.85  # t/m³


def calculate_order_weight(
    width: float,
    length: float,
    thickness: float,
    quantity: int,
    density: float = STEEL_DENSITY,
) -> float:
    """
    Weight of a stack of sheets.

    weight (t) = width × length × thickness × quantity × density / 10⁹

    Examples:
        1200 × 2500 × 2.0 mm, 100 sheets → 4.71 t

    Returns:
        Weight in tonnes, rounded to 2 decimals
    """
    weight = (width * length * thickness * quantity * density) / 1_000_000_000
    return round(weight, 2)


def calculate_coil_length(
    weight: float,
    width: float,
    thickness: float,
    density: float = STEEL_DENSITY,
) -> int:
    """
    Length of a coil from its weight and cross-section.

    length = weight / (density × width × thickness)

    Returns:
        Length in mm, rounded; 0 if any input is not a positive number
    """
    if not all(math.isfinite(v) and v > 0 for v in (weight, width, thickness)):
        return 0

    weight_kg = weight * 1000
    density_kg_m3 = density * 1000
    width_m = width / 1000
    thickness_m = thickness / 1000

    length_m = weight_kg / (density_kg_m3 * width_m * thickness_m)
    return round(length_m * 1000)


def safe_weight(value: float) -> float:
    """Clamp a weight to a finite, non-negative number (0 otherwise)."""
    if value is None or not math.isfinite(value) or value < 0:
        return 0.0
    return value


def is_allocatable_weight(value: float) -> bool:
    """True if a weight is finite and strictly positive."""
    return value is not None and math.isfinite(value) and value > 0
