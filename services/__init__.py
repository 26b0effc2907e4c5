"""
Business logic services.

Each service handles one domain area.
"""

from services.unfulfilled_order_service import (
    UnfulfilledOrderService,
    get_unfulfilled_order_service,
)
from services.acknowledgment_service import (
    AcknowledgmentService,
    get_acknowledgment_service,
)
from services.export_service import ExportService, get_export_service

__all__ = [
    "UnfulfilledOrderService",
    "get_unfulfilled_order_service",
    "AcknowledgmentService",
    "get_acknowledgment_service",
    "ExportService",
    "get_export_service",
]
