"""
RM forecast service — Purchase recommendations for unfulfilled demand.

Unfulfilled orders are grouped by (thickness, grade). Each group gets
one recommendation:

    recommended_width  = widest order + trim margin (20 mm)
    recommended_weight = ceil(Σ order weight × buffer (1.1))

Order weights that are not finite or are negative count as 0, so a
malformed order can never push a NaN or negative recommendation out.
The output depends only on the input orders; ids come from the prefix
the caller passes in.
"""

from math import ceil, isfinite
from typing import Optional, Sequence

import structlog

from config import settings
from models.forecast import ForecastOrderDetail, RMForecast
from models.order import Order
from utils.steel_utils import safe_weight

logger = structlog.get_logger(__name__)


class ForecastService:
    """Turns unfulfilled orders into raw-material forecasts."""

    def __init__(
        self,
        width_margin_mm: Optional[float] = None,
        weight_buffer: Optional[float] = None,
    ):
        self.width_margin_mm = (
            settings.forecast_width_margin_mm if width_margin_mm is None else width_margin_mm
        )
        self.weight_buffer = (
            settings.forecast_weight_buffer if weight_buffer is None else weight_buffer
        )

    def generate(self, orders: Sequence[Order], id_prefix: str = "forecast") -> list[RMForecast]:
        """
        Build one forecast per (thickness, grade) among the given orders.

        Args:
            orders: Orders no coil could serve
            id_prefix: Prefix for forecast ids ({prefix}-F001, ...)

        Returns:
            Forecasts in the order each spec was first seen
        """
        groups: dict[tuple[float, str], list[Order]] = {}
        for order in orders:
            groups.setdefault((order.thickness, order.grade), []).append(order)

        forecasts: list[RMForecast] = []
        for (thickness, grade), group in groups.items():
            forecast = self._build_forecast(
                forecast_id=f"{id_prefix}-F{len(forecasts) + 1:03d}",
                thickness=thickness,
                grade=grade,
                group=group,
            )
            if forecast is None:
                logger.warning(
                    "forecast_suppressed",
                    thickness=thickness,
                    grade=grade,
                    order_ids=[order.id for order in group],
                )
                continue
            forecasts.append(forecast)

        logger.info(
            "forecasts_generated",
            unfulfilled_orders=len(orders),
            forecast_count=len(forecasts),
        )

        return forecasts

    def _build_forecast(
        self,
        forecast_id: str,
        thickness: float,
        grade: str,
        group: list[Order],
    ) -> Optional[RMForecast]:
        """Forecast for one spec group, or None if the numbers are unusable."""
        total_weight = sum(safe_weight(order.weight) for order in group)
        recommended_weight = max(0.0, total_weight * self.weight_buffer)
        if not isfinite(recommended_weight):
            return None

        max_width = max(order.width for order in group)
        recommended_width = max(0, ceil(max_width + self.width_margin_mm))

        return RMForecast(
            id=forecast_id,
            recommended_width=recommended_width,
            recommended_thickness=max(0.0, thickness),
            recommended_weight=ceil(recommended_weight),
            grade=grade,
            unfulfilled=[order.id for order in group],
            quantity=len(group),
            order_details=[
                ForecastOrderDetail(
                    order_id=order.id,
                    required_width=order.width,
                    required_length=order.length,
                    quantity=order.quantity,
                    estimated_weight=safe_weight(order.weight),
                )
                for order in group
            ],
        )


# Singleton
_forecast_service: Optional[ForecastService] = None


def get_forecast_service() -> ForecastService:
    """Get the singleton forecast service instance."""
    global _forecast_service
    if _forecast_service is None:
        _forecast_service = ForecastService()
    return _forecast_service
