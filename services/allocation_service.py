"""
Allocation service — Three-pass greedy coil-to-order allocation.

Algorithm:
1. SCREEN orders whose weight is not a positive finite number (they
   go straight to the forecast)
2. GROUP the rest by thickness/grade/product and near-identical width
3. PASS 1: give each group the single best-scoring coil that can carry
   the whole group; a coil is claimed by at most one group
4. PASS 2: for orders still pending (priority order), draw from
   matching coils with the MOST free capacity first, one partial
   assignment per coil, until the order is covered
5. PASS 3: same draw for what is still pending, but from the LEAST
   free capacity first, to drain coil balances before fresh coils

The capacity ledger is passed into every pass and a new one is handed
back, so nothing is shared between runs. An order leaves the pending
set once the ledger shows at least `fulfillment_threshold` of its
weight allocated. Partial draws below the threshold are kept.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from config import settings
from models.assignment import CuttingPattern
from models.coil import Coil
from models.ledger import CapacityLedger
from models.line import Line
from models.optimization import TraceAction, TraceEvent
from models.order import Order
from services.compatibility_service import find_compatible_line, shares_material_spec
from services.grouping_service import GroupingService, get_grouping_service
from services.pattern_service import PatternService, get_pattern_service
from utils.steel_utils import is_allocatable_weight

logger = structlog.get_logger(__name__)


# Below this, capacity and outstanding weight count as zero (t)
EPSILON = 1e-9


@dataclass
class PassOutcome:
    """What one allocation pass hands to the next."""
    pass_number: int
    patterns: list[CuttingPattern]
    ledger: CapacityLedger
    pending: list[Order]
    events: list[TraceEvent] = field(default_factory=list)


@dataclass
class AllocationOutcome:
    """Result of all three passes."""
    passes: list[PassOutcome]
    ledger: CapacityLedger
    unfulfilled: list[Order]
    events: list[TraceEvent] = field(default_factory=list)


class AllocationService:
    """Runs the three allocation passes over one snapshot."""

    def __init__(
        self,
        pattern_service: Optional[PatternService] = None,
        grouping_service: Optional[GroupingService] = None,
        fulfillment_threshold: Optional[float] = None,
    ):
        self.pattern_service = pattern_service or get_pattern_service()
        self.grouping_service = grouping_service or get_grouping_service()
        self.fulfillment_threshold = (
            settings.fulfillment_threshold
            if fulfillment_threshold is None
            else fulfillment_threshold
        )

    def allocate(
        self,
        coils: Sequence[Coil],
        orders: Sequence[Order],
        lines: Sequence[Line],
    ) -> AllocationOutcome:
        """
        Allocate coils to orders.

        Args:
            coils: Coil snapshot
            orders: Order snapshot
            lines: Processing lines

        Returns:
            AllocationOutcome with per-pass patterns, the final ledger
            and the orders left unfulfilled (input order)
        """
        events: list[TraceEvent] = []
        allocatable = []
        skipped_ids = set()

        for order in orders:
            if is_allocatable_weight(order.weight):
                allocatable.append(order)
            else:
                skipped_ids.add(order.id)
                events.append(TraceEvent(
                    pass_number=0,
                    action=TraceAction.ORDER_SKIPPED,
                    order_ids=[order.id],
                    message=f"Order {order.label}: weight {order.weight} is not allocatable",
                ))
                logger.warning(
                    "order_skipped_invalid_weight",
                    order_id=order.id,
                    weight=order.weight,
                )

        ledger = CapacityLedger()

        pass_one = self.run_pass_one(allocatable, coils, lines, ledger)
        pass_two = self.run_pass_two(pass_one.pending, coils, lines, pass_one.ledger)
        pass_three = self.run_pass_three(pass_two.pending, coils, lines, pass_two.ledger)

        still_pending = {order.id for order in pass_three.pending} | skipped_ids
        unfulfilled = [order for order in orders if order.id in still_pending]

        logger.info(
            "allocation_complete",
            pass_one_patterns=len(pass_one.patterns),
            pass_two_patterns=len(pass_two.patterns),
            pass_three_patterns=len(pass_three.patterns),
            unfulfilled=len(unfulfilled),
        )

        return AllocationOutcome(
            passes=[pass_one, pass_two, pass_three],
            ledger=pass_three.ledger,
            unfulfilled=unfulfilled,
            events=events,
        )

    # ===================
    # PASS 1
    # ===================

    def run_pass_one(
        self,
        orders: Sequence[Order],
        coils: Sequence[Coil],
        lines: Sequence[Line],
        ledger: CapacityLedger,
    ) -> PassOutcome:
        """
        Single-coil group match.

        Each group is offered every unclaimed coil with the same
        thickness/grade/product that is at least as wide as the widest
        order and at least as heavy as the whole group. The
        highest-scoring pattern wins; the first one wins ties.
        """
        groups = self.grouping_service.group_orders(orders)
        events = [TraceEvent(
            pass_number=1,
            action=TraceAction.ORDERS_GROUPED,
            order_ids=[order.id for order in orders],
            message=f"Grouped {len(orders)} orders into {len(groups)} compatible groups",
        )]
        patterns: list[CuttingPattern] = []
        claimed: set[str] = set()
        assigned_ids: set[str] = set()

        for group in groups:
            anchor = group[0]
            max_width = max(order.width for order in group)
            total_weight = sum(order.weight for order in group)
            group_ids = [order.id for order in group]

            best: Optional[CuttingPattern] = None
            for coil in coils:
                if coil.id in claimed:
                    continue
                if not shares_material_spec(anchor, coil):
                    continue
                if coil.width < max_width or coil.weight < total_weight:
                    continue

                pattern = self.pattern_service.score(coil, group, lines)
                if pattern and (best is None or pattern.total_score > best.total_score):
                    best = pattern

            if best is None:
                events.append(TraceEvent(
                    pass_number=1,
                    action=TraceAction.GROUP_UNMATCHED,
                    order_ids=group_ids,
                    weight=total_weight,
                    message=f"No single coil can carry group of {len(group)} orders",
                ))
                continue

            patterns.append(best)
            claimed.add(best.coil_id)
            ledger = ledger.commit(best.coil_id, {order.id: order.weight for order in group})
            assigned_ids.update(group_ids)

            events.append(TraceEvent(
                pass_number=1,
                action=TraceAction.GROUP_ASSIGNED,
                coil_ids=[best.coil_id],
                order_ids=group_ids,
                weight=best.allocated_weight,
                message=(
                    f"Group of {len(group)} orders assigned to coil {best.coil_id} "
                    f"with {best.utilization:.1f}% utilization"
                ),
            ))
            logger.debug(
                "pass_one_group_assigned",
                coil_id=best.coil_id,
                order_ids=group_ids,
                allocated=round(best.allocated_weight, 3),
                balance=round(best.remaining_weight, 3),
            )

        pending = [order for order in orders if order.id not in assigned_ids]

        logger.info(
            "pass_one_complete",
            groups=len(groups),
            assigned_groups=len(patterns),
            pending=len(pending),
        )

        return PassOutcome(
            pass_number=1,
            patterns=patterns,
            ledger=ledger,
            pending=pending,
            events=events,
        )

    # ===================
    # PASS 2 / PASS 3
    # ===================

    def run_pass_two(
        self,
        pending: Sequence[Order],
        coils: Sequence[Coil],
        lines: Sequence[Line],
        ledger: CapacityLedger,
    ) -> PassOutcome:
        """Multi-coil fulfillment, largest free capacity first."""
        return self._draw_pass(2, pending, coils, lines, ledger, largest_first=True)

    def run_pass_three(
        self,
        pending: Sequence[Order],
        coils: Sequence[Coil],
        lines: Sequence[Line],
        ledger: CapacityLedger,
    ) -> PassOutcome:
        """Balance allocation, smallest free capacity first."""
        return self._draw_pass(3, pending, coils, lines, ledger, largest_first=False)

    def _draw_pass(
        self,
        pass_number: int,
        pending: Sequence[Order],
        coils: Sequence[Coil],
        lines: Sequence[Line],
        ledger: CapacityLedger,
        largest_first: bool,
    ) -> PassOutcome:
        """
        Greedy draw of pending orders across several coils.

        Orders are served by priority. For each, matching coils with
        free capacity are ranked by that capacity and drawn from until
        the order's outstanding weight is covered.
        """
        patterns: list[CuttingPattern] = []
        events: list[TraceEvent] = []
        fulfilled_ids: set[str] = set()

        if pending:
            events.append(TraceEvent(
                pass_number=pass_number,
                action=TraceAction.PASS_STARTED,
                order_ids=[order.id for order in pending],
                message=(
                    f"Pass {pass_number}: {len(pending)} pending orders, "
                    f"{'largest' if largest_first else 'smallest'} coil balance first"
                ),
            ))

        for order in sorted(pending, key=lambda o: o.priority):
            outstanding = ledger.outstanding(order.id, order.weight)

            candidates = [
                (coil, ledger.remaining(coil.id, coil.weight))
                for coil in coils
                if shares_material_spec(order, coil) and coil.width >= order.width
            ]
            candidates = [(coil, free) for coil, free in candidates if free > EPSILON]
            candidates.sort(key=lambda item: item[1], reverse=largest_first)

            drawn_from: list[str] = []
            for coil, free in candidates:
                if outstanding <= EPSILON:
                    break

                line = find_compatible_line(coil, lines)
                if line is None:
                    events.append(TraceEvent(
                        pass_number=pass_number,
                        action=TraceAction.COIL_SKIPPED_NO_LINE,
                        coil_ids=[coil.id],
                        order_ids=[order.id],
                        message=f"Coil {coil.label}: no compatible line",
                    ))
                    continue

                drawn = min(free, outstanding)
                ledger = ledger.commit(coil.id, {order.id: drawn})
                patterns.append(self.pattern_service.partial(
                    coil=coil,
                    line=line,
                    order=order,
                    allocated_weight=drawn,
                    committed_after=ledger.committed(coil.id),
                    still_short=outstanding > drawn,
                ))
                outstanding -= drawn
                drawn_from.append(coil.id)

                events.append(TraceEvent(
                    pass_number=pass_number,
                    action=TraceAction.COIL_DRAWN,
                    coil_ids=[coil.id],
                    order_ids=[order.id],
                    weight=drawn,
                    message=f"Allocated {drawn:.2f} MT from {coil.label} to {order.label}",
                ))

            allocated = ledger.allocated(order.id)
            if allocated >= order.weight * self.fulfillment_threshold:
                fulfilled_ids.add(order.id)
                action = TraceAction.ORDER_FULFILLED
                message = f"Order {order.label}: fulfilled using {len(drawn_from)} coil(s)"
            elif drawn_from:
                action = TraceAction.ORDER_PARTIAL
                message = (
                    f"Order {order.label}: partial "
                    f"({allocated:.2f}/{order.weight:.2f} MT allocated)"
                )
            else:
                action = TraceAction.ORDER_UNMATCHED
                message = f"Order {order.label}: no compatible coil balance"

            events.append(TraceEvent(
                pass_number=pass_number,
                action=action,
                coil_ids=drawn_from,
                order_ids=[order.id],
                weight=allocated,
                message=message,
            ))
            logger.debug(
                "order_draw_finished",
                pass_number=pass_number,
                order_id=order.id,
                action=action.value,
                allocated=round(allocated, 3),
                required=order.weight,
            )

        still_pending = [order for order in pending if order.id not in fulfilled_ids]

        logger.info(
            "draw_pass_complete",
            pass_number=pass_number,
            patterns=len(patterns),
            fulfilled=len(fulfilled_ids),
            pending=len(still_pending),
        )

        return PassOutcome(
            pass_number=pass_number,
            patterns=patterns,
            ledger=ledger,
            pending=still_pending,
            events=events,
        )


# Singleton
_allocation_service: Optional[AllocationService] = None


def get_allocation_service() -> AllocationService:
    """Get the singleton allocation service instance."""
    global _allocation_service
    if _allocation_service is None:
        _allocation_service = AllocationService()
    return _allocation_service
