"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so the
routes can turn it into the standard error body.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ACKNOWLEDGMENT_NOT_FOUND")
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
        self.timestamp = datetime.utcnow().isoformat()
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


class AuthenticationError(AppError):
    """No authenticated user (401)."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            code="NOT_AUTHENTICATED",
            message=message,
            status_code=401
        )


class AuthServiceError(AppError):
    """Supabase Auth could not verify a token (503)."""

    def __init__(self, message: str):
        super().__init__(
            code="AUTH_SERVICE_UNAVAILABLE",
            message=f"Could not verify access token: {message}",
            status_code=503
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# ACKNOWLEDGMENT ERRORS
# ===================

class AcknowledgmentNotFoundError(NotFoundError):
    """Acknowledgment not found."""

    def __init__(self, acknowledgment_id: str):
        super().__init__(
            resource="Acknowledgment",
            identifier=acknowledgment_id,
            code="ACKNOWLEDGMENT_NOT_FOUND"
        )


class InvalidDateRangeError(ValidationError):
    """History filter with start after end."""

    def __init__(self, start_date: str, end_date: str):
        super().__init__(
            code="INVALID_DATE_RANGE",
            message="start_date must be on or before end_date",
            details={"start_date": start_date, "end_date": end_date}
        )


class WorkOrderLinkError(AppError):
    """
    Acknowledgment was linked but the work order flag was not set.

    The acknowledgment row already points at the work order; only the
    work order's acknowledged_unfulfilled_items flag is missing.
    """

    def __init__(self, acknowledgment_id: str, work_order_id: str, reason: str):
        super().__init__(
            code="WORK_ORDER_LINK_INCOMPLETE",
            message="Acknowledgment linked, but work order could not be marked as acknowledged",
            status_code=500,
            details={
                "acknowledgment_id": acknowledgment_id,
                "work_order_id": work_order_id,
                "acknowledgment_linked": True,
                "work_order_flagged": False,
                "reason": reason,
            }
        )
