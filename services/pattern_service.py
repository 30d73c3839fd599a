"""
Pattern scoring — scrap, utilization and score for a coil/order pairing.

Formulas:
    coil_consumption = Σ order.weight / coil.weight × 100
    side_scrap       = Σ (coil.width − order.width) × order.length
    end_scrap        = max(0, coil.length − Σ order.length × order.quantity)
    utilization      = order_length / (order_length + side_scrap) × 100
    score            = utilization × 10 − (side_scrap + end_scrap) / 1000 − changeover

The changeover penalty is a fixed floor per pattern, so fewer and
larger patterns score better than many small ones.
"""

from typing import Optional, Sequence

from config import settings
from models.assignment import CuttingPattern, OrderAllocation
from models.coil import Coil
from models.line import Line
from models.order import Order
from services.compatibility_service import find_compatible_line, order_fits_coil


class PatternService:
    """Builds and scores cutting patterns."""

    def __init__(self, changeover_cost: Optional[float] = None):
        self.changeover_cost = (
            settings.changeover_cost if changeover_cost is None else changeover_cost
        )

    def score(
        self,
        coil: Coil,
        orders: Sequence[Order],
        lines: Sequence[Line],
    ) -> Optional[CuttingPattern]:
        """
        Score one coil serving a set of orders in full.

        Args:
            coil: Candidate coil
            orders: Orders to cut from it, in group order
            lines: Lines to search for one that can run the coil

        Returns:
            CuttingPattern, or None if any order doesn't fit the coil,
            no line can run it, or the orders outweigh it
        """
        if not orders:
            return None
        if not all(order_fits_coil(order, coil) for order in orders):
            return None

        line = find_compatible_line(coil, lines)
        if line is None:
            return None

        total_order_weight = sum(order.weight for order in orders)
        coil_consumption = total_order_weight / coil.weight * 100
        if coil_consumption > 100:
            return None

        side_scrap = sum((coil.width - order.width) * order.length for order in orders)
        total_order_length = sum(order.length * order.quantity for order in orders)
        end_scrap = max(0.0, coil.length - total_order_length)

        total_material = total_order_length + side_scrap
        utilization = total_order_length / total_material * 100 if total_material > 0 else 0.0

        return CuttingPattern(
            coil_id=coil.id,
            line_id=line.id,
            order_ids=[order.id for order in orders],
            side_scrap=side_scrap,
            end_scrap=end_scrap,
            utilization=utilization,
            changeover_cost=self.changeover_cost,
            total_score=self._total_score(utilization, side_scrap + end_scrap),
            coil_consumption=coil_consumption,
            coil_balance=100 - coil_consumption,
            allocated_weight=total_order_weight,
            remaining_weight=coil.weight - total_order_weight,
            is_partial_allocation=False,
            order_allocations=[
                OrderAllocation(order_id=order.id, allocated_weight=order.weight, is_partial=False)
                for order in orders
            ],
        )

    def partial(
        self,
        coil: Coil,
        line: Line,
        order: Order,
        allocated_weight: float,
        committed_after: float,
        still_short: bool,
    ) -> CuttingPattern:
        """
        Pattern for drawing part of one order from part of one coil.

        Side scrap is pro-rated by the share of the order drawn; end
        scrap is not tracked for partial draws.

        Args:
            coil: Coil drawn from
            line: Line that runs the coil
            order: Order served
            allocated_weight: Tonnes drawn in this step
            committed_after: Tonnes committed on the coil including this draw
            still_short: True if the order needed more than this draw
        """
        share = allocated_weight / order.weight if order.weight > 0 else 0.0
        side_scrap = (coil.width - order.width) * order.length * share
        utilization = allocated_weight / coil.weight * 100
        coil_consumption = committed_after / coil.weight * 100

        return CuttingPattern(
            coil_id=coil.id,
            line_id=line.id,
            order_ids=[order.id],
            side_scrap=side_scrap,
            end_scrap=0.0,
            utilization=utilization,
            changeover_cost=self.changeover_cost,
            total_score=self._total_score(utilization, side_scrap),
            coil_consumption=coil_consumption,
            coil_balance=100 - coil_consumption,
            allocated_weight=allocated_weight,
            remaining_weight=coil.weight - committed_after,
            is_partial_allocation=True,
            order_allocations=[
                OrderAllocation(
                    order_id=order.id,
                    allocated_weight=allocated_weight,
                    is_partial=still_short,
                )
            ],
        )

    def _total_score(self, utilization: float, total_scrap: float) -> float:
        return utilization * 10 - total_scrap / 1000 - self.changeover_cost


# Singleton
_pattern_service: Optional[PatternService] = None


def get_pattern_service() -> PatternService:
    """Get the singleton pattern service instance."""
    global _pattern_service
    if _pattern_service is None:
        _pattern_service = PatternService()
    return _pattern_service
