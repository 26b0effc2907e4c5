"""
Unfulfilled sales order schemas.

One UnfulfilledItem per product size whose open sales-order demand exceeds
available stock, scored and leveled for display. Acknowledgments are
immutable snapshots of that list taken by a user.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from pydantic import Field

from models.base import BaseSchema


class PriorityLevel(str, Enum):
    """Urgency bucket, derived from days until due only."""

    CRITICAL = "critical"  # Overdue or due within 2 days
    HIGH = "high"          # Due within 7 days
    MEDIUM = "medium"      # Due within 14 days
    LOW = "low"            # Later, or no due date


class UnfulfilledItem(BaseSchema):
    """A product size with a shortage, scored for priority."""

    product_size_id: str = Field(..., description="Product size UUID")
    product_code: str = Field(default="N/A", description="Product code")
    product_description: str = Field(default="Unknown", description="Product description")
    product_id: Optional[str] = Field(None, description="Product UUID")
    size_type: Optional[str] = Field(None, description="Size type")

    total_quantity_needed: float = Field(default=0, description="Quantity demanded by open sales orders")
    total_available_stock: float = Field(default=0, description="Stock available for the product size")
    shortage_quantity: float = Field(default=0, description="max(needed - available, 0)")

    earliest_due_date: Optional[date] = Field(None, description="Earliest requested delivery date")
    number_of_sales_orders: int = Field(default=0, ge=0, description="Open sales orders demanding this size")
    sales_order_numbers: list[str] = Field(default_factory=list)

    due_date_factor: float = Field(default=10, ge=0, le=100)
    shortage_factor: float = Field(default=0, ge=0, le=100)
    demand_breadth_factor: float = Field(default=0, ge=0, le=100)
    priority_score: float = Field(default=0, ge=0, le=100, description="Composite 0-100 score")
    priority_level: PriorityLevel = Field(default=PriorityLevel.LOW)


class UnfulfilledItemsResponse(BaseSchema):
    """Prioritized unfulfilled list."""

    items: list[UnfulfilledItem] = Field(default_factory=list)
    total_count: int = 0
    total_open_sos: int = Field(
        default=0,
        description="Largest sales-order count of any row (breadth normalizer)"
    )
    distinct_sales_orders: int = Field(
        default=0,
        description="Number of distinct open sales orders across all rows"
    )
    level_counts: dict[str, int] = Field(default_factory=dict)
    fetched_at: Optional[datetime] = None


# ===================
# ACKNOWLEDGMENTS
# ===================

class AcknowledgmentCreate(BaseSchema):
    """Acknowledge the current prioritized list."""

    # Stored as submitted; only the caller is checked
    items: list[dict[str, Any]] = Field(
        default_factory=list,
        description="The list as shown to the user"
    )
    notes: Optional[str] = Field(None, max_length=1000)


class WorkOrderLinkRequest(BaseSchema):
    """Attach a work order to an acknowledgment."""

    work_order_id: str = Field(..., min_length=1, description="Work order UUID")


class AcknowledgmentResponse(BaseSchema):
    """Acknowledgment response model."""

    id: str
    user_id: str
    acknowledged_at: datetime
    unfulfilled_items_snapshot: list[dict[str, Any]] = Field(default_factory=list)
    work_order_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    # Optional enriched data (joined from related tables)
    user_name: Optional[str] = None
    work_order_number: Optional[str] = None
    work_order_status: Optional[str] = None

    @property
    def item_count(self) -> int:
        return len(self.unfulfilled_items_snapshot)


class AcknowledgmentListResponse(BaseSchema):
    """Acknowledgment history."""

    data: list[AcknowledgmentResponse]
    total: int
