"""
Coil usage service — Per-coil consumption and multi-coil orders.

For every coil:
    consumed  = min(Σ assignment.allocated_weight, coil.weight)
    remainder = coil.weight − consumed

    no assignments                  → UNUSED     (balance 100%)
    remainder < full_use_balance_pct → FULLY_USED (remainder is scrap)
    otherwise                       → PARTIAL    (remainder is balance)

Works on any assignment set, proposed or confirmed. Assignments that
reference unknown coils or orders are left out.
"""

from typing import Optional, Sequence

import structlog

from config import settings
from models.assignment import Assignment
from models.coil import Coil
from models.order import Order
from models.usage import (
    CoilOrderShare,
    CoilUsage,
    CoilUsageStatus,
    MultiCoilOrder,
    OrderCoilShare,
    UsageReport,
)
from utils.steel_utils import safe_weight

logger = structlog.get_logger(__name__)


class UsageService:
    """Builds coil usage reports."""

    def __init__(self, full_use_balance_pct: Optional[float] = None):
        self.full_use_balance_pct = (
            settings.full_use_balance_pct
            if full_use_balance_pct is None
            else full_use_balance_pct
        )

    def report(
        self,
        coils: Sequence[Coil],
        orders: Sequence[Order],
        assignments: Sequence[Assignment],
    ) -> UsageReport:
        """
        Usage of every coil plus the orders split across coils.

        Args:
            coils: Coils to report on (report keeps their order)
            orders: Orders the assignments serve
            assignments: Assignment set, proposed or confirmed

        Returns:
            UsageReport
        """
        usage = self.coil_usage(coils, assignments)
        multi_coil = self.multi_coil_orders(coils, orders, assignments)

        report = UsageReport(
            coils=usage,
            multi_coil_orders=multi_coil,
            unused_coils=sum(1 for u in usage if u.status == CoilUsageStatus.UNUSED),
            partial_coils=sum(1 for u in usage if u.status == CoilUsageStatus.PARTIAL),
            fully_used_coils=sum(1 for u in usage if u.status == CoilUsageStatus.FULLY_USED),
            total_balance_weight=sum(u.balance_weight for u in usage),
            total_scrap_weight=sum(u.scrap_weight for u in usage),
        )

        logger.info(
            "coil_usage_reported",
            coils=len(usage),
            unused=report.unused_coils,
            partial=report.partial_coils,
            fully_used=report.fully_used_coils,
            multi_coil_orders=len(multi_coil),
        )

        return report

    def coil_usage(
        self,
        coils: Sequence[Coil],
        assignments: Sequence[Assignment],
    ) -> list[CoilUsage]:
        """Consumption, balance and status for each coil."""
        by_coil: dict[str, list[Assignment]] = {}
        for assignment in assignments:
            by_coil.setdefault(assignment.coil_id, []).append(assignment)

        return [self._usage_for(coil, by_coil.get(coil.id, [])) for coil in coils]

    def multi_coil_orders(
        self,
        coils: Sequence[Coil],
        orders: Sequence[Order],
        assignments: Sequence[Assignment],
    ) -> list[MultiCoilOrder]:
        """Orders drawing from two or more coils, in first-served order."""
        coil_ids = {coil.id for coil in coils}
        orders_by_id = {order.id: order for order in orders}
        shares: dict[str, dict[str, float]] = {}

        for assignment in assignments:
            if assignment.coil_id not in coil_ids:
                continue
            for allocation in assignment.order_allocations:
                if allocation.order_id not in orders_by_id:
                    continue
                per_coil = shares.setdefault(allocation.order_id, {})
                per_coil[assignment.coil_id] = (
                    per_coil.get(assignment.coil_id, 0.0) + allocation.allocated_weight
                )

        result = []
        for order_id, per_coil in shares.items():
            if len(per_coil) < 2:
                continue
            order = orders_by_id[order_id]
            order_weight = safe_weight(order.weight)
            allocated = sum(per_coil.values())
            result.append(MultiCoilOrder(
                order_id=order.id,
                order_code=order.order_code,
                order_weight=order_weight,
                allocated_weight=allocated,
                unfulfilled_weight=max(0.0, order_weight - allocated),
                coils=[
                    OrderCoilShare(coil_id=coil_id, allocated_weight=weight)
                    for coil_id, weight in per_coil.items()
                ],
            ))

        return result

    def _usage_for(self, coil: Coil, assignments: list[Assignment]) -> CoilUsage:
        if not assignments:
            return CoilUsage(
                coil_id=coil.id,
                coil_code=coil.coil_code,
                weight=coil.weight,
                consumed_weight=0,
                balance_weight=coil.weight,
                consumed_percentage=0,
                balance_percentage=100,
                status=CoilUsageStatus.UNUSED,
            )

        order_weights: dict[str, float] = {}
        for assignment in assignments:
            for allocation in assignment.order_allocations:
                order_weights[allocation.order_id] = (
                    order_weights.get(allocation.order_id, 0.0) + allocation.allocated_weight
                )

        consumed = min(sum(a.allocated_weight for a in assignments), coil.weight)
        remainder = max(0.0, coil.weight - consumed)
        remainder_pct = remainder * 100 / coil.weight
        fully_used = remainder_pct < self.full_use_balance_pct

        return CoilUsage(
            coil_id=coil.id,
            coil_code=coil.coil_code,
            weight=coil.weight,
            consumed_weight=consumed,
            balance_weight=0 if fully_used else remainder,
            scrap_weight=remainder if fully_used else 0,
            consumed_percentage=consumed * 100 / coil.weight,
            balance_percentage=0 if fully_used else remainder_pct,
            scrap_percentage=remainder_pct if fully_used else 0,
            status=CoilUsageStatus.FULLY_USED if fully_used else CoilUsageStatus.PARTIAL,
            orders=[
                CoilOrderShare(order_id=order_id, allocated_weight=weight)
                for order_id, weight in order_weights.items()
            ],
        )


# Singleton
_usage_service: Optional[UsageService] = None


def get_usage_service() -> UsageService:
    """Get the singleton usage service instance."""
    global _usage_service
    if _usage_service is None:
        _usage_service = UsageService()
    return _usage_service
