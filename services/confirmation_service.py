"""
Confirmation service — Applies or discards a proposed assignment set.

confirm():
    1. Assignments PROPOSED -> CONFIRMED
    2. Every coil referenced by an assignment -> USED
    3. Every order's status recomputed from the weight its breakdowns
       credit it: COMPLETED at >= threshold, ASSIGNED if > 0, else PENDING

clear():
    Every coil -> AVAILABLE, no assignments, no forecasts.

confirm() validates everything before building any output, so a failed
call leaves the caller's values as they were. clear() never fails.
Order weight is credited only from per-order breakdowns; an assignment
without one is rejected rather than assumed to cover its orders in full.
"""

from typing import Optional, Sequence

import structlog

from config import settings
from exceptions import (
    AssignmentBreakdownMissingError,
    CoilNotFoundError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
)
from models.assignment import Assignment, AssignmentStatus, is_valid_assignment_transition
from models.coil import Coil, CoilStatus, is_valid_coil_transition
from models.confirmation import ClearResult, ConfirmationResult
from models.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


def derive_order_status(allocated: float, required: float, threshold: float) -> OrderStatus:
    """Order status implied by how much of its weight is allocated."""
    if allocated <= 0:
        return OrderStatus.PENDING
    if allocated >= required * threshold:
        return OrderStatus.COMPLETED
    return OrderStatus.ASSIGNED


class ConfirmationService:
    """Status transitions for coils, orders and assignments."""

    def __init__(self, fulfillment_threshold: Optional[float] = None):
        self.fulfillment_threshold = (
            settings.fulfillment_threshold
            if fulfillment_threshold is None
            else fulfillment_threshold
        )

    def confirm(
        self,
        coils: Sequence[Coil],
        orders: Sequence[Order],
        assignments: Sequence[Assignment],
    ) -> ConfirmationResult:
        """
        Confirm a proposed assignment set.

        Args:
            coils: Current coils
            orders: Current orders
            assignments: Assignments from one optimization run

        Returns:
            ConfirmationResult with new assignment, coil and order values

        Raises:
            InvalidStatusTransitionError: Assignment not PROPOSED, or coil can't be used
            AssignmentBreakdownMissingError: Assignment has no per-order allocations
            CoilNotFoundError: Assignment references an unknown coil
            OrderNotFoundError: Breakdown references an unknown order
        """
        logger.info(
            "confirming_assignments",
            assignments=len(assignments),
            coils=len(coils),
            orders=len(orders),
        )

        coils_by_id = {coil.id: coil for coil in coils}
        orders_by_id = {order.id: order for order in orders}
        allocated: dict[str, float] = {}

        for assignment in assignments:
            if not is_valid_assignment_transition(assignment.status, AssignmentStatus.CONFIRMED):
                raise InvalidStatusTransitionError(
                    "Assignment", assignment.id,
                    assignment.status.value, AssignmentStatus.CONFIRMED.value,
                )
            if not assignment.order_allocations:
                raise AssignmentBreakdownMissingError(assignment.id)

            coil = coils_by_id.get(assignment.coil_id)
            if coil is None:
                raise CoilNotFoundError(assignment.coil_id)
            if not is_valid_coil_transition(coil.status, CoilStatus.USED):
                raise InvalidStatusTransitionError(
                    "Coil", coil.id, coil.status.value, CoilStatus.USED.value,
                )

            for allocation in assignment.order_allocations:
                if allocation.order_id not in orders_by_id:
                    raise OrderNotFoundError(allocation.order_id)
                allocated[allocation.order_id] = (
                    allocated.get(allocation.order_id, 0.0) + allocation.allocated_weight
                )

        used_coil_ids = {assignment.coil_id for assignment in assignments}

        confirmed = [
            assignment.model_copy(update={"status": AssignmentStatus.CONFIRMED})
            for assignment in assignments
        ]
        new_coils = [
            coil.model_copy(update={"status": CoilStatus.USED}) if coil.id in used_coil_ids else coil
            for coil in coils
        ]
        new_orders = [
            order.model_copy(update={
                "status": derive_order_status(
                    allocated.get(order.id, 0.0), order.weight, self.fulfillment_threshold
                )
            })
            for order in orders
        ]

        logger.info(
            "assignments_confirmed",
            assignments=len(confirmed),
            coils_used=len(used_coil_ids),
            orders_completed=sum(1 for o in new_orders if o.status == OrderStatus.COMPLETED),
            orders_assigned=sum(1 for o in new_orders if o.status == OrderStatus.ASSIGNED),
        )

        return ConfirmationResult(
            assignments=confirmed,
            coils=new_coils,
            orders=new_orders,
            allocated_weight_by_order=allocated,
        )

    def clear(self, coils: Sequence[Coil]) -> ClearResult:
        """
        Discard the current assignment set.

        Every coil goes back to AVAILABLE; assignments and forecasts
        are emptied. Coils already AVAILABLE are returned as they are.
        """
        released = [
            coil if coil.status == CoilStatus.AVAILABLE
            else coil.model_copy(update={"status": CoilStatus.AVAILABLE})
            for coil in coils
        ]

        logger.info(
            "assignments_cleared",
            coils=len(released),
            released=sum(1 for coil in coils if coil.status != CoilStatus.AVAILABLE),
        )

        return ClearResult(coils=released, assignments=[], forecasts=[])


# Singleton
_confirmation_service: Optional[ConfirmationService] = None


def get_confirmation_service() -> ConfirmationService:
    """Get the singleton confirmation service instance."""
    global _confirmation_service
    if _confirmation_service is None:
        _confirmation_service = ConfirmationService()
    return _confirmation_service
