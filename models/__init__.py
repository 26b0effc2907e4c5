"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.unfulfilled_order import (
    PriorityLevel,
    UnfulfilledItem,
    UnfulfilledItemsResponse,
    AcknowledgmentCreate,
    WorkOrderLinkRequest,
    AcknowledgmentResponse,
    AcknowledgmentListResponse,
)

__all__ = [
    "BaseSchema",
    "PriorityLevel",
    "UnfulfilledItem",
    "UnfulfilledItemsResponse",
    "AcknowledgmentCreate",
    "WorkOrderLinkRequest",
    "AcknowledgmentResponse",
    "AcknowledgmentListResponse",
]
