"""
API route modules.
"""

from routes.optimization import router as optimization_router

__all__ = [
    "optimization_router",
]
