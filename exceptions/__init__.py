"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthServiceError,
    DatabaseError,

    # Acknowledgments
    AcknowledgmentNotFoundError,
    InvalidDateRangeError,
    WorkOrderLinkError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthServiceError",
    "DatabaseError",

    # Acknowledgments
    "AcknowledgmentNotFoundError",
    "InvalidDateRangeError",
    "WorkOrderLinkError",
]
