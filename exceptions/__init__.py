"""
Custom exceptions module.

Every error carries a code, message, HTTP status and details.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DuplicateError,

    # Snapshot
    DuplicateEntityError,

    # Lookups
    CoilNotFoundError,
    OrderNotFoundError,

    # Confirmation
    InvalidStatusTransitionError,
    AssignmentBreakdownMissingError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateError",

    # Snapshot
    "DuplicateEntityError",

    # Lookups
    "CoilNotFoundError",
    "OrderNotFoundError",

    # Confirmation
    "InvalidStatusTransitionError",
    "AssignmentBreakdownMissingError",
]
