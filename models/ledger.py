"""
Capacity ledger for a single optimization run.

Tracks how much of each coil has been committed and how much of each
order has been allocated. The ledger is an immutable value: every
commit returns a new ledger, so each allocation pass takes one in and
hands one back.
"""

from pydantic import BaseModel, ConfigDict, Field


class CapacityLedger(BaseModel):
    """Committed coil weight and allocated order weight (t)."""

    model_config = ConfigDict(frozen=True)

    coil_committed: dict[str, float] = Field(default_factory=dict)
    order_allocated: dict[str, float] = Field(default_factory=dict)

    def committed(self, coil_id: str) -> float:
        return self.coil_committed.get(coil_id, 0.0)

    def remaining(self, coil_id: str, coil_weight: float) -> float:
        """Weight still free on a coil."""
        return coil_weight - self.committed(coil_id)

    def allocated(self, order_id: str) -> float:
        return self.order_allocated.get(order_id, 0.0)

    def outstanding(self, order_id: str, order_weight: float) -> float:
        """Weight an order still needs."""
        return order_weight - self.allocated(order_id)

    def commit(self, coil_id: str, allocations: dict[str, float]) -> "CapacityLedger":
        """
        Record weight drawn from one coil for one or more orders.

        Args:
            coil_id: Coil the weight is drawn from
            allocations: order_id -> weight drawn for that order

        Returns:
            New ledger with both columns updated
        """
        coils = dict(self.coil_committed)
        coils[coil_id] = coils.get(coil_id, 0.0) + sum(allocations.values())

        orders = dict(self.order_allocated)
        for order_id, weight in allocations.items():
            orders[order_id] = orders.get(order_id, 0.0) + weight

        return CapacityLedger(coil_committed=coils, order_allocated=orders)
