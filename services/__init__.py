"""
Business logic services.

Each service handles one step of the allocation engine.
"""

from services.pattern_service import PatternService, get_pattern_service
from services.grouping_service import GroupingService, get_grouping_service
from services.allocation_service import (
    AllocationService,
    AllocationOutcome,
    PassOutcome,
    get_allocation_service,
)
from services.forecast_service import ForecastService, get_forecast_service
from services.optimization_service import OptimizationService, get_optimization_service
from services.confirmation_service import ConfirmationService, get_confirmation_service
from services.usage_service import UsageService, get_usage_service

__all__ = [
    "PatternService",
    "get_pattern_service",
    "GroupingService",
    "get_grouping_service",
    "AllocationService",
    "AllocationOutcome",
    "PassOutcome",
    "get_allocation_service",
    "ForecastService",
    "get_forecast_service",
    "OptimizationService",
    "get_optimization_service",
    "ConfirmationService",
    "get_confirmation_service",
    "UsageService",
    "get_usage_service",
]
