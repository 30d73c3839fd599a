"""
Compatibility checks between coils, lines and orders.

Pure predicates, called inside every allocation loop.
"""

from typing import Optional, Sequence

from models.coil import Coil
from models.line import Line
from models.order import Order


def line_fits(coil: Coil, line: Line) -> bool:
    """True if the coil is inside the line's width/thickness/weight envelope."""
    return (
        line.min_width <= coil.width <= line.max_width
        and coil.thickness <= line.max_thickness
        and coil.weight <= line.max_weight
    )


def order_fits_coil(order: Order, coil: Coil) -> bool:
    """
    True if the coil can serve the whole order on its own.

    Grade and thickness must match exactly; the coil must be at least
    as wide and as heavy as the order.
    """
    return (
        order.grade == coil.grade
        and order.thickness == coil.thickness
        and order.width <= coil.width
        and order.weight <= coil.weight
    )


def shares_material_spec(order: Order, coil: Coil) -> bool:
    """Grade, thickness and product family all match."""
    return (
        order.grade == coil.grade
        and order.thickness == coil.thickness
        and order.product == coil.product
    )


def find_compatible_line(coil: Coil, lines: Sequence[Line]) -> Optional[Line]:
    """First line (in input order) that can run the coil."""
    for line in lines:
        if line_fits(coil, line):
            return line
    return None
