"""
Unit tests for ForecastService.

Run: pytest tests/unit/test_forecast_service.py -v
"""

import math

import pytest

from models.product import ProductFamily
from services.forecast_service import ForecastService
from tests.factories import OrderFactory


@pytest.fixture
def service():
    return ForecastService(width_margin_mm=20, weight_buffer=1.1)


# ===================
# RECOMMENDATION MATH
# ===================

class TestRecommendation:
    """
    recommended_width  = max width + 20
    recommended_weight = ceil(Σ weight × 1.1)
    """

    def test_single_order(self, service):
        order = OrderFactory.create(id="order-1", width=1200, thickness=2.0, grade="IS2062", weight=15)

        forecasts = service.generate([order], id_prefix="run1")

        assert len(forecasts) == 1
        forecast = forecasts[0]
        assert forecast.id == "run1-F001"
        assert forecast.recommended_width == 1220
        assert forecast.recommended_thickness == 2.0
        assert forecast.recommended_weight == 17
        assert forecast.grade == "IS2062"
        assert forecast.unfulfilled == ["order-1"]
        assert forecast.quantity == 1

    def test_group_uses_widest_order_and_total_weight(self, service):
        orders = [
            OrderFactory.create(id="a", width=1000, weight=12.5),
            OrderFactory.create(id="b", width=1240.4, weight=7.25),
        ]

        forecast = service.generate(orders)[0]

        assert forecast.recommended_width == math.ceil(1240.4 + 20)
        assert forecast.recommended_weight == math.ceil((12.5 + 7.25) * 1.1)
        assert forecast.quantity == 2
        assert [d.order_id for d in forecast.order_details] == ["a", "b"]

    def test_order_details(self, service):
        order = OrderFactory.create(id="o", width=1100, length=3000, quantity=40, weight=9.5)

        detail = service.generate([order])[0].order_details[0]

        assert detail.required_width == 1100
        assert detail.required_length == 3000
        assert detail.quantity == 40
        assert detail.estimated_weight == 9.5

    def test_custom_margin_and_buffer(self):
        service = ForecastService(width_margin_mm=50, weight_buffer=1.25)
        order = OrderFactory.create(width=1200, weight=10)

        forecast = service.generate([order])[0]

        assert forecast.recommended_width == 1250
        assert forecast.recommended_weight == math.ceil(10 * 1.25)


# ===================
# GROUPING
# ===================

class TestGrouping:

    def test_one_forecast_per_thickness_and_grade(self, service):
        orders = [
            OrderFactory.create(id="a", thickness=2.0, grade="CRCA"),
            OrderFactory.create(id="b", thickness=1.5, grade="CRCA"),
            OrderFactory.create(id="c", thickness=2.0, grade="CRCA"),
            OrderFactory.create(id="d", thickness=2.0, grade="DD"),
        ]

        forecasts = service.generate(orders, id_prefix="p")

        assert [f.unfulfilled for f in forecasts] == [["a", "c"], ["b"], ["d"]]
        assert [f.id for f in forecasts] == ["p-F001", "p-F002", "p-F003"]

    def test_product_family_not_part_of_key(self, service):
        orders = [
            OrderFactory.create(id="cr", product=ProductFamily.CR),
            OrderFactory.create(id="gp", product=ProductFamily.GP),
        ]

        forecasts = service.generate(orders)

        assert len(forecasts) == 1
        assert forecasts[0].unfulfilled == ["cr", "gp"]

    def test_empty_input(self, service):
        assert service.generate([]) == []


# ===================
# MALFORMED WEIGHTS
# ===================

class TestMalformedWeights:
    """Non-finite and negative weights count as zero."""

    def test_nan_weight_ignored_in_total(self, service):
        orders = [
            OrderFactory.create(id="bad", weight=float("nan")),
            OrderFactory.create(id="good", weight=15),
        ]

        forecast = service.generate(orders)[0]

        assert forecast.recommended_weight == 17
        assert forecast.unfulfilled == ["bad", "good"]
        assert forecast.order_details[0].estimated_weight == 0

    def test_negative_weight_clamped(self, service):
        order = OrderFactory.create(weight=-8)

        forecast = service.generate([order])[0]

        assert forecast.recommended_weight == 0
        assert forecast.order_details[0].estimated_weight == 0

    def test_infinite_weight_ignored(self, service):
        order = OrderFactory.create(weight=float("inf"))

        forecast = service.generate([order])[0]

        assert forecast.recommended_weight == 0

    def test_overflowing_total_suppressed(self, service):
        """1.7e308 × 1.1 overflows to inf; the group gets no forecast."""
        huge = OrderFactory.create(id="huge", grade="X", weight=1.7e308)
        normal = OrderFactory.create(id="normal", grade="CRCA", weight=15)

        forecasts = service.generate([huge, normal], id_prefix="r")

        assert [f.unfulfilled for f in forecasts] == [["normal"]]
        for forecast in forecasts:
            assert math.isfinite(forecast.recommended_weight)
            assert forecast.recommended_weight >= 0


def test_same_input_same_output(service):
    orders = [
        OrderFactory.create(id="a", width=1200, weight=4.2),
        OrderFactory.create(id="b", width=900, thickness=1.2, weight=6.6),
    ]

    first = [f.model_dump() for f in service.generate(orders, id_prefix="x")]
    second = [f.model_dump() for f in service.generate(orders, id_prefix="x")]

    assert first == second
