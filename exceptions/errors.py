"""
Custom exception classes for the application.

The allocation engine itself never raises for infeasible demand; these
errors cover malformed snapshots and the confirm/clear contracts.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "COIL_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DuplicateError(ConflictError):
    """Duplicate resource (409)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str
    ):
        super().__init__(
            code=f"{resource.upper()}_{field.upper()}_EXISTS",
            message=f"{resource} with this {field} already exists",
            details={field: value}
        )


# ===================
# SNAPSHOT ERRORS
# ===================

class DuplicateEntityError(DuplicateError):
    """The same id appears twice in one input collection."""

    def __init__(self, resource: str, entity_id: str):
        super().__init__(
            resource=resource,
            field="id",
            value=entity_id
        )


# ===================
# LOOKUP ERRORS
# ===================

class CoilNotFoundError(NotFoundError):
    """Coil not found."""

    def __init__(self, coil_id: str):
        super().__init__(
            resource="Coil",
            identifier=coil_id,
            code="COIL_NOT_FOUND"
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Order",
            identifier=order_id,
            code="ORDER_NOT_FOUND"
        )


# ===================
# CONFIRMATION ERRORS
# ===================

class InvalidStatusTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, entity_id: str, current_status: str, new_status: str):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot transition {entity} from {current_status} to {new_status}",
            details={
                "entity": entity,
                "id": entity_id,
                "current_status": current_status,
                "new_status": new_status,
            }
        )


class AssignmentBreakdownMissingError(ValidationError):
    """Assignment carries no per-order allocation breakdown."""

    def __init__(self, assignment_id: str):
        super().__init__(
            code="ASSIGNMENT_BREAKDOWN_MISSING",
            message="Assignment has no per-order allocations; cannot credit order weight",
            details={"assignment_id": assignment_id}
        )
