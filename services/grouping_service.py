"""
Order grouping — clusters orders that can share one coil.

Orders are sorted by priority (ascending), width (descending) and
thickness (descending). Each ungrouped order in that sequence anchors a
group and pulls in every other ungrouped order with the same
thickness, grade and product whose width is within the tolerance of
the anchor's. The sort decides which orders anchor groups.
"""

from typing import Optional, Sequence

import structlog

from config import settings
from models.order import Order

logger = structlog.get_logger(__name__)


def group_sort_key(order: Order) -> tuple:
    """Priority asc, width desc, thickness desc; id keeps ties stable."""
    return (order.priority, -order.width, -order.thickness, order.id)


class GroupingService:
    """Partitions orders into same-spec, near-same-width groups."""

    def __init__(self, width_tolerance_mm: Optional[float] = None):
        self.width_tolerance_mm = (
            settings.group_width_tolerance_mm
            if width_tolerance_mm is None
            else width_tolerance_mm
        )

    def group_orders(self, orders: Sequence[Order]) -> list[list[Order]]:
        """
        Partition orders into groups.

        Every order lands in exactly one group; a group may hold a
        single order. Coil availability is not considered here.

        Args:
            orders: Orders to partition

        Returns:
            Groups in anchor order, each group anchor first
        """
        ordered = sorted(orders, key=group_sort_key)
        grouped: set[str] = set()
        groups: list[list[Order]] = []

        for anchor in ordered:
            if anchor.id in grouped:
                continue

            group = [anchor]
            grouped.add(anchor.id)

            for other in ordered:
                if other.id in grouped:
                    continue
                if self._can_join(anchor, other):
                    group.append(other)
                    grouped.add(other.id)

            groups.append(group)

        logger.debug(
            "orders_grouped",
            order_count=len(ordered),
            group_count=len(groups),
        )

        return groups

    def _can_join(self, anchor: Order, other: Order) -> bool:
        return (
            other.thickness == anchor.thickness
            and other.grade == anchor.grade
            and other.product == anchor.product
            and abs(other.width - anchor.width) <= self.width_tolerance_mm
        )


# Singleton
_grouping_service: Optional[GroupingService] = None


def get_grouping_service() -> GroupingService:
    """Get the singleton grouping service instance."""
    global _grouping_service
    if _grouping_service is None:
        _grouping_service = GroupingService()
    return _grouping_service
