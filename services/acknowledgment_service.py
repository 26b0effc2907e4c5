"""
Acknowledgment service for business logic operations.

Records that a user reviewed the prioritized unfulfilled list, links the
record to a production work order, and answers the daily prompt gate and
the audit history.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional, Union
import structlog

from config import get_supabase_client
from models.unfulfilled_order import (
    UnfulfilledItem,
    AcknowledgmentResponse,
)
from services.auth_service import require_user_id
from exceptions import (
    AcknowledgmentNotFoundError,
    DatabaseError,
    InvalidDateRangeError,
    WorkOrderLinkError,
)

logger = structlog.get_logger(__name__)

WORK_ORDERS_TABLE = "work_orders"

HISTORY_SELECT = (
    "*, "
    "profile:profiles!unfulfilled_so_acknowledgments_user_id_fkey(first_name, last_name), "
    "work_order:work_orders(wo_number, wo_status)"
)


def local_midnight(now: Optional[datetime] = None) -> datetime:
    """Start of the current local day, timezone-aware."""
    now = (now or datetime.now()).astimezone()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min).astimezone()


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max).astimezone()


def _snapshot_item(item: Union[UnfulfilledItem, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(item, UnfulfilledItem):
        return item.model_dump(mode="json")
    return dict(item)


def format_user_name(profile: Optional[dict]) -> str:
    """'First Last' from a joined profile, 'Unknown' when missing."""
    if not profile:
        return "Unknown"
    parts = [profile.get("first_name"), profile.get("last_name")]
    return " ".join(p for p in parts if p) or "Unknown"


class AcknowledgmentService:
    """
    Acknowledgment business logic.

    Acknowledgments are immutable snapshots; the only later write is the
    work order link.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "unfulfilled_so_acknowledgments"

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create_acknowledgment(
        self,
        user_id: Optional[str],
        items: list[Union[UnfulfilledItem, dict[str, Any]]],
        notes: Optional[str] = None,
    ) -> AcknowledgmentResponse:
        """
        Acknowledge a prioritized list.

        Any list is accepted, including an empty one.

        Args:
            user_id: Authenticated user UUID
            items: The list as shown to the user
            notes: Optional free text

        Returns:
            Created AcknowledgmentResponse

        Raises:
            AuthenticationError: If there is no user (nothing is inserted)
            DatabaseError: If the insert fails
        """
        user_id = require_user_id(user_id)

        logger.info(
            "creating_acknowledgment",
            user_id=user_id,
            item_count=len(items),
            has_notes=bool(notes)
        )

        ack_data = {
            "user_id": user_id,
            "acknowledged_at": datetime.now(timezone.utc).isoformat(),
            "unfulfilled_items_snapshot": [_snapshot_item(item) for item in items],
            "notes": notes or None,
        }

        try:
            result = (
                self.db.table(self.table)
                .insert(ack_data)
                .execute()
            )
        except Exception as e:
            logger.error("create_acknowledgment_failed", user_id=user_id, error=str(e))
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No row returned")

        acknowledgment = self._row_to_response(result.data[0])

        logger.info(
            "acknowledgment_created",
            acknowledgment_id=acknowledgment.id,
            user_id=user_id,
            item_count=acknowledgment.item_count
        )

        return acknowledgment

    def link_to_work_order(self, acknowledgment_id: str, work_order_id: str) -> None:
        """
        Link an acknowledgment to a work order.

        Two sequential updates, not a transaction: the acknowledgment gets
        work_order_id, then the work order gets
        acknowledged_unfulfilled_items = true.

        Args:
            acknowledgment_id: Acknowledgment UUID
            work_order_id: Work order UUID

        Raises:
            AcknowledgmentNotFoundError: If the acknowledgment doesn't exist
            DatabaseError: If the acknowledgment update fails
            WorkOrderLinkError: If the acknowledgment was linked but the
                work order could not be flagged
        """
        logger.info(
            "linking_acknowledgment_to_work_order",
            acknowledgment_id=acknowledgment_id,
            work_order_id=work_order_id
        )

        try:
            result = (
                self.db.table(self.table)
                .update({"work_order_id": work_order_id})
                .eq("id", acknowledgment_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "acknowledgment_link_failed",
                acknowledgment_id=acknowledgment_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

        if not result.data:
            raise AcknowledgmentNotFoundError(acknowledgment_id)

        try:
            wo_result = (
                self.db.table(WORK_ORDERS_TABLE)
                .update({"acknowledged_unfulfilled_items": True})
                .eq("id", work_order_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "work_order_flag_failed",
                acknowledgment_id=acknowledgment_id,
                work_order_id=work_order_id,
                error=str(e)
            )
            raise WorkOrderLinkError(acknowledgment_id, work_order_id, str(e))

        if not wo_result.data:
            logger.error(
                "work_order_flag_failed",
                acknowledgment_id=acknowledgment_id,
                work_order_id=work_order_id,
                error="work order not found"
            )
            raise WorkOrderLinkError(acknowledgment_id, work_order_id, "Work order not found")

        logger.info(
            "acknowledgment_linked",
            acknowledgment_id=acknowledgment_id,
            work_order_id=work_order_id
        )

    # ===================
    # READ OPERATIONS
    # ===================

    def get_todays_acknowledgment(
        self,
        user_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> Optional[AcknowledgmentResponse]:
        """
        Most recent acknowledgment by this user since local midnight.

        Args:
            user_id: User UUID; None means anonymous
            now: Reference time (defaults to now)

        Returns:
            AcknowledgmentResponse, or None if none today or no user
        """
        if not user_id:
            return None

        since = local_midnight(now)
        logger.debug("getting_todays_acknowledgment", user_id=user_id, since=since.isoformat())

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .gte("acknowledged_at", since.isoformat())
                .order("acknowledged_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_todays_acknowledgment_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None

        return self._row_to_response(result.data[0])

    def get_history(
        self,
        user_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[AcknowledgmentResponse]:
        """
        Acknowledgments newest first.

        Args:
            user_id: Only this user's acknowledgments
            start_date: From the start of this local day
            end_date: Through the end of this local day

        Returns:
            List of AcknowledgmentResponse with user name and work order

        Raises:
            InvalidDateRangeError: If start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise InvalidDateRangeError(start_date.isoformat(), end_date.isoformat())

        logger.info(
            "getting_acknowledgment_history",
            user_id=user_id,
            start_date=str(start_date) if start_date else None,
            end_date=str(end_date) if end_date else None
        )

        try:
            query = self.db.table(self.table).select(HISTORY_SELECT)

            if user_id:
                query = query.eq("user_id", user_id)
            if start_date:
                query = query.gte("acknowledged_at", _start_of_day(start_date).isoformat())
            if end_date:
                query = query.lte("acknowledged_at", _end_of_day(end_date).isoformat())

            result = query.order("acknowledged_at", desc=True).execute()

        except Exception as e:
            logger.error("get_acknowledgment_history_failed", error=str(e))
            raise DatabaseError("select", str(e))

        acknowledgments = [self._row_to_response(row) for row in result.data or []]

        logger.info("acknowledgment_history_retrieved", count=len(acknowledgments))

        return acknowledgments

    # ===================
    # HELPERS
    # ===================

    def _row_to_response(self, row: dict) -> AcknowledgmentResponse:
        """Convert database row to response, flattening joined data."""
        work_order = row.get("work_order") or {}
        profile = row.get("profile")

        return AcknowledgmentResponse(
            id=row["id"],
            user_id=row["user_id"],
            acknowledged_at=row.get("acknowledged_at") or row.get("created_at"),
            unfulfilled_items_snapshot=row.get("unfulfilled_items_snapshot") or [],
            work_order_id=row.get("work_order_id"),
            notes=row.get("notes"),
            created_at=row.get("created_at"),
            user_name=format_user_name(profile) if "profile" in row else None,
            work_order_number=work_order.get("wo_number"),
            work_order_status=work_order.get("wo_status"),
        )


# Singleton instance
_acknowledgment_service: Optional[AcknowledgmentService] = None


def get_acknowledgment_service() -> AcknowledgmentService:
    """Get or create AcknowledgmentService instance."""
    global _acknowledgment_service
    if _acknowledgment_service is None:
        _acknowledgment_service = AcknowledgmentService()
    return _acknowledgment_service
