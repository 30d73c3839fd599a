"""
Unit tests for the three-pass AllocationService.

Run: pytest tests/unit/test_allocation_service.py -v
"""

import pytest

from models.ledger import CapacityLedger
from models.optimization import TraceAction
from models.product import ProductFamily
from services.allocation_service import AllocationService
from services.grouping_service import GroupingService
from services.pattern_service import PatternService
from tests.factories import CoilFactory, LineFactory, OrderFactory


# ===================
# FIXTURES
# ===================

@pytest.fixture
def service():
    return AllocationService(
        pattern_service=PatternService(changeover_cost=100),
        grouping_service=GroupingService(width_tolerance_mm=10),
        fulfillment_threshold=0.99,
    )


def drawn_by_coil(patterns):
    return [(p.coil_id, pytest.approx(p.allocated_weight)) for p in patterns]


def actions(events):
    return [event.action for event in events]


# ===================
# LEDGER
# ===================

class TestCapacityLedger:

    def test_commit_returns_new_ledger(self):
        empty = CapacityLedger()

        ledger = empty.commit("c1", {"a": 4, "b": 3})

        assert empty.committed("c1") == 0
        assert ledger.committed("c1") == 7
        assert ledger.allocated("a") == 4
        assert ledger.allocated("b") == 3

    def test_remaining_and_outstanding(self):
        ledger = CapacityLedger().commit("c1", {"a": 4}).commit("c2", {"a": 2.5})

        assert ledger.remaining("c1", 20) == 16
        assert ledger.outstanding("a", 10) == pytest.approx(3.5)
        assert ledger.outstanding("unknown", 10) == 10


# ===================
# PASS 1
# ===================

class TestPassOne:
    """Single best coil per group."""

    def test_picks_highest_scoring_coil(self, service, standard_line):
        """
        1200 mm order, 25 m of sheet.
        wide coil (1300): side scrap 250000 → 9.1% utilization
        snug coil (1210): side scrap 25000  → 50% utilization
        """
        order = OrderFactory.create(width=1200, length=2500, quantity=10, weight=10)
        wide = CoilFactory.create(id="wide", width=1300, length=25000, weight=20)
        snug = CoilFactory.create(id="snug", width=1210, length=25000, weight=20)

        outcome = service.run_pass_one([order], [wide, snug], [standard_line], CapacityLedger())

        assert [p.coil_id for p in outcome.patterns] == ["snug"]
        assert outcome.pending == []
        assert outcome.ledger.committed("snug") == 10
        assert outcome.ledger.allocated(order.id) == 10

    def test_first_coil_wins_tie(self, service, standard_line):
        order = OrderFactory.create(weight=10)
        first = CoilFactory.create(id="first")
        second = CoilFactory.create(id="second")

        outcome = service.run_pass_one([order], [first, second], [standard_line], CapacityLedger())

        assert outcome.patterns[0].coil_id == "first"

    def test_group_shares_one_coil(self, service, standard_line):
        orders = [
            OrderFactory.create(id="a", width=1200, weight=8),
            OrderFactory.create(id="b", width=1195, weight=6),
        ]
        coil = CoilFactory.create(id="coil", weight=20)

        outcome = service.run_pass_one(orders, [coil], [standard_line], CapacityLedger())

        assert len(outcome.patterns) == 1
        assert outcome.patterns[0].order_ids == ["a", "b"]
        assert outcome.ledger.committed("coil") == pytest.approx(14)

    def test_claimed_coil_not_offered_to_next_group(self, service, standard_line):
        first = OrderFactory.create(id="first", width=1200, weight=8, priority=1)
        second = OrderFactory.create(id="second", width=1000, weight=6, priority=2)
        coil = CoilFactory.create(id="coil", weight=20)

        outcome = service.run_pass_one([first, second], [coil], [standard_line], CapacityLedger())

        assert [p.order_ids for p in outcome.patterns] == [["first"]]
        assert [o.id for o in outcome.pending] == ["second"]
        assert TraceAction.GROUP_UNMATCHED in actions(outcome.events)

    def test_group_heavier_than_any_coil_is_pending(self, service, standard_line):
        order = OrderFactory.create(weight=30)
        coils = [CoilFactory.create(weight=20), CoilFactory.create(weight=15)]

        outcome = service.run_pass_one([order], coils, [standard_line], CapacityLedger())

        assert outcome.patterns == []
        assert outcome.pending == [order]

    def test_product_mismatch_excluded(self, service, standard_line):
        order = OrderFactory.create(product=ProductFamily.HR, weight=10)
        coil = CoilFactory.create(product=ProductFamily.CR)

        outcome = service.run_pass_one([order], [coil], [standard_line], CapacityLedger())

        assert outcome.patterns == []

    def test_grouping_event_first(self, service, standard_line, crca_coil, crca_order):
        outcome = service.run_pass_one([crca_order], [crca_coil], [standard_line], CapacityLedger())

        assert outcome.events[0].action == TraceAction.ORDERS_GROUPED
        assert outcome.events[-1].action == TraceAction.GROUP_ASSIGNED


# ===================
# PASS 2
# ===================

class TestPassTwo:
    """Multi-coil draw, largest free capacity first."""

    def test_draws_largest_coil_first(self, service, standard_line):
        order = OrderFactory.create(id="big", weight=30)
        small = CoilFactory.create(id="small", weight=12)
        large = CoilFactory.create(id="large", weight=25)

        outcome = service.run_pass_two([order], [small, large], [standard_line], CapacityLedger())

        assert drawn_by_coil(outcome.patterns) == [("large", 25), ("small", 5)]
        assert outcome.pending == []
        assert outcome.ledger.allocated("big") == pytest.approx(30)

    def test_ranks_by_free_capacity_not_coil_weight(self, service, standard_line):
        order = OrderFactory.create(id="o", weight=8)
        a = CoilFactory.create(id="a", weight=20)
        b = CoilFactory.create(id="b", weight=20)
        ledger = CapacityLedger().commit("a", {"other": 15}).commit("b", {"other": 5})

        outcome = service.run_pass_two([order], [a, b], [standard_line], ledger)

        assert drawn_by_coil(outcome.patterns) == [("b", 8)]

    def test_partial_below_threshold_is_kept(self, service, standard_line):
        order = OrderFactory.create(id="big", weight=30)
        coil = CoilFactory.create(id="only", weight=20)

        outcome = service.run_pass_two([order], [coil], [standard_line], CapacityLedger())

        assert drawn_by_coil(outcome.patterns) == [("only", 20)]
        assert outcome.patterns[0].order_allocations[0].is_partial is True
        assert outcome.pending == [order]
        assert outcome.events[-1].action == TraceAction.ORDER_PARTIAL

    def test_priority_order_served_first(self, service, standard_line):
        later = OrderFactory.create(id="later", width=1100, weight=25, priority=3)
        urgent = OrderFactory.create(id="urgent", width=1200, weight=25, priority=1)
        coils = [CoilFactory.create(id="c1", weight=20), CoilFactory.create(id="c2", weight=20)]

        outcome = service.run_pass_two([later, urgent], coils, [standard_line], CapacityLedger())

        assert outcome.patterns[0].order_ids == ["urgent"]
        assert outcome.ledger.allocated("urgent") == pytest.approx(25)
        assert outcome.ledger.allocated("later") == pytest.approx(15)
        assert [o.id for o in outcome.pending] == ["later"]

    def test_only_outstanding_weight_is_drawn(self, service, standard_line):
        order = OrderFactory.create(id="o", weight=10)
        coil = CoilFactory.create(id="c", weight=20)
        ledger = CapacityLedger().commit("elsewhere", {"o": 6})

        outcome = service.run_pass_two([order], [coil], [standard_line], ledger)

        assert drawn_by_coil(outcome.patterns) == [("c", 4)]
        assert outcome.ledger.allocated("o") == pytest.approx(10)

    def test_coil_without_line_is_skipped(self, service):
        line = LineFactory.create(max_width=1240)
        order = OrderFactory.create(weight=10)
        coil = CoilFactory.create(id="wide", width=1250)

        outcome = service.run_pass_two([order], [coil], [line], CapacityLedger())

        assert outcome.patterns == []
        assert TraceAction.COIL_SKIPPED_NO_LINE in actions(outcome.events)
        assert outcome.events[-1].action == TraceAction.ORDER_UNMATCHED

    def test_narrow_coil_not_drawn(self, service, standard_line):
        order = OrderFactory.create(width=1200, weight=10)
        coil = CoilFactory.create(width=1100)

        outcome = service.run_pass_two([order], [coil], [standard_line], CapacityLedger())

        assert outcome.patterns == []

    def test_no_pending_no_events(self, service, standard_line, crca_coil):
        outcome = service.run_pass_two([], [crca_coil], [standard_line], CapacityLedger())

        assert outcome.patterns == []
        assert outcome.events == []


# ===================
# PASS 3
# ===================

class TestPassThree:
    """Balance draw, smallest free capacity first."""

    def test_drains_smallest_balance_first(self, service, standard_line):
        """a has 5 t free, b has 15 t free: take 5 from a, then 3 from b."""
        order = OrderFactory.create(id="o", weight=8)
        a = CoilFactory.create(id="a", weight=20)
        b = CoilFactory.create(id="b", weight=20)
        ledger = CapacityLedger().commit("a", {"other": 15}).commit("b", {"other": 5})

        outcome = service.run_pass_three([order], [a, b], [standard_line], ledger)

        assert drawn_by_coil(outcome.patterns) == [("a", 5), ("b", 3)]
        assert outcome.patterns[0].coil_consumption == pytest.approx(100)
        assert outcome.pending == []

    def test_does_not_redraw_allocated_weight(self, service, standard_line):
        order = OrderFactory.create(id="o", weight=10)
        coil = CoilFactory.create(id="c", weight=20)
        ledger = CapacityLedger().commit("c", {"o": 6})

        outcome = service.run_pass_three([order], [coil], [standard_line], ledger)

        assert drawn_by_coil(outcome.patterns) == [("c", 4)]
        assert outcome.ledger.committed("c") == pytest.approx(10)

    def test_full_coils_are_not_candidates(self, service, standard_line):
        order = OrderFactory.create(weight=5)
        coil = CoilFactory.create(id="full", weight=20)
        ledger = CapacityLedger().commit("full", {"other": 20})

        outcome = service.run_pass_three([order], [coil], [standard_line], ledger)

        assert outcome.patterns == []
        assert outcome.pending == [order]


# ===================
# FULL RUN
# ===================

class TestAllocate:

    def test_invalid_weights_skipped(self, service, standard_line, crca_coil):
        orders = [
            OrderFactory.create(id="nan", weight=float("nan")),
            OrderFactory.create(id="zero", weight=0),
            OrderFactory.create(id="negative", weight=-5),
            OrderFactory.create(id="inf", weight=float("inf")),
        ]

        outcome = service.allocate([crca_coil], orders, [standard_line])

        assert all(not p.patterns for p in outcome.passes)
        assert outcome.ledger.committed(crca_coil.id) == 0
        assert [o.id for o in outcome.unfulfilled] == ["nan", "zero", "negative", "inf"]
        assert actions(outcome.events) == [TraceAction.ORDER_SKIPPED] * 4

    def test_unfulfilled_kept_in_input_order(self, service, standard_line):
        orders = [
            OrderFactory.create(id="z", grade="IS2062", priority=3),
            OrderFactory.create(id="bad", weight=float("nan")),
            OrderFactory.create(id="a", grade="DD", priority=1),
        ]

        outcome = service.allocate([CoilFactory.create()], orders, [standard_line])

        assert [o.id for o in outcome.unfulfilled] == ["z", "bad", "a"]

    def test_pass_one_leftover_reaches_pass_two(self, service, standard_line):
        """Pass 1 claims the coil for 8 t; the other order draws 6 t from its balance in pass 2."""
        first = OrderFactory.create(id="first", width=1200, weight=8, priority=1)
        second = OrderFactory.create(id="second", width=1000, weight=6, priority=2)
        coil = CoilFactory.create(id="coil", weight=20)

        outcome = service.allocate([coil], [first, second], [standard_line])

        pass_one, pass_two, pass_three = outcome.passes
        assert [p.coil_id for p in pass_one.patterns] == ["coil"]
        assert drawn_by_coil(pass_two.patterns) == [("coil", 6)]
        assert pass_three.patterns == []
        assert outcome.ledger.committed("coil") == pytest.approx(14)
        assert outcome.unfulfilled == []

    def test_empty_inputs(self, service, standard_line):
        outcome = service.allocate([], [], [standard_line])

        assert all(not p.patterns for p in outcome.passes)
        assert outcome.unfulfilled == []

    def test_no_lines_leaves_everything_unfulfilled(self, service, crca_coil, crca_order):
        outcome = service.allocate([crca_coil], [crca_order], [])

        assert outcome.unfulfilled == [crca_order]
        assert outcome.ledger.committed(crca_coil.id) == 0

    def test_capacity_and_demand_conserved(self, service, standard_line):
        coils = [
            CoilFactory.create(id="c1", weight=20),
            CoilFactory.create(id="c2", weight=7.5),
            CoilFactory.create(id="c3", weight=12.25, width=1500),
            CoilFactory.create(id="c4", weight=9, grade="IS2062"),
        ]
        orders = [
            OrderFactory.create(id="o1", width=1200, weight=11.3, priority=2),
            OrderFactory.create(id="o2", width=1195, weight=4.4, priority=1),
            OrderFactory.create(id="o3", width=1400, weight=17.9, priority=1),
            OrderFactory.create(id="o4", width=900, weight=6.05, priority=3),
            OrderFactory.create(id="o5", width=1000, weight=3.3, grade="IS2062"),
            OrderFactory.create(id="o6", width=1000, weight=8.8, priority=2),
        ]

        outcome = service.allocate(coils, orders, [standard_line])
        patterns = [p for pass_outcome in outcome.passes for p in pass_outcome.patterns]

        for coil in coils:
            drawn = sum(
                a.allocated_weight
                for p in patterns if p.coil_id == coil.id
                for a in p.order_allocations
            )
            assert drawn <= coil.weight + 1e-6
            assert drawn == pytest.approx(outcome.ledger.committed(coil.id))

        for order in orders:
            allocated = sum(
                a.allocated_weight
                for p in patterns
                for a in p.order_allocations if a.order_id == order.id
            )
            assert allocated <= order.weight + 1e-6
            assert allocated == pytest.approx(outcome.ledger.allocated(order.id))

        for p in patterns:
            assert p.coil_consumption + p.coil_balance == pytest.approx(100)
            assert p.order_allocations

    def test_ledger_not_shared_between_runs(self, service, standard_line, crca_coil, crca_order):
        first = service.allocate([crca_coil], [crca_order], [standard_line])
        second = service.allocate([crca_coil], [crca_order], [standard_line])

        assert first.ledger.committed(crca_coil.id) == 15
        assert second.ledger.committed(crca_coil.id) == 15
