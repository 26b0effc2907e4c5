"""
Unfulfilled sales order prioritization: Core business logic.

Reads the vw_unfulfilled_sales_order_items view (one row per product size
short of stock) and ranks every row with a 0-100 priority score:

    score = due_date_factor * 0.5 + shortage_factor * 0.3 + demand_breadth_factor * 0.2

The priority level shown next to each row is derived from days until due
only, never from the score.

The scored list is cached for unfulfilled_cache_ttl_seconds and rebuilt in
full on every refetch.
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional
import structlog

from config import get_supabase_client, settings
from models.unfulfilled_order import (
    PriorityLevel,
    UnfulfilledItem,
    UnfulfilledItemsResponse,
)
from services import cache_service
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

VIEW_NAME = "vw_unfulfilled_sales_order_items"
CACHE_KEY = "unfulfilled-sales-orders"

# Score weights
DUE_DATE_WEIGHT = 0.5
SHORTAGE_WEIGHT = 0.3
DEMAND_BREADTH_WEIGHT = 0.2

NO_DUE_DATE_FACTOR = 10


# ===================
# SCORING
# ===================

def days_until_due(earliest_due_date: Optional[date], today: date) -> Optional[int]:
    """Whole calendar days from today to the due date. Negative when overdue."""
    if earliest_due_date is None:
        return None
    return (earliest_due_date - today).days


def calculate_due_date_factor(days: Optional[int]) -> float:
    """
    Step function of days until due.

    None -> 10, overdue -> 100, 0-2 -> 75, 3-7 -> 50, 8-14 -> 25, later -> 10.
    """
    if days is None:
        return NO_DUE_DATE_FACTOR
    if days < 0:
        return 100
    if days <= 2:
        return 75
    if days <= 7:
        return 50
    if days <= 14:
        return 25
    return 10


def calculate_shortage_factor(shortage_quantity: float, max_shortage: float) -> float:
    """Shortage relative to the largest shortage in the dataset, 0-100."""
    if max_shortage <= 0:
        return 0.0
    return max(shortage_quantity, 0) / max_shortage * 100


def calculate_demand_breadth_factor(so_count: int, total_open_sos: int) -> float:
    """Sales-order count relative to the widest demand in the dataset, 0-100."""
    if total_open_sos <= 0:
        return 0.0
    return max(so_count, 0) / total_open_sos * 100


def calculate_priority_score(
    days: Optional[int],
    shortage_quantity: float,
    max_shortage: float,
    so_count: int,
    total_open_sos: int,
) -> float:
    """Weighted composite of the three factors, clamped to [0, 100]."""
    score = (
        calculate_due_date_factor(days) * DUE_DATE_WEIGHT
        + calculate_shortage_factor(shortage_quantity, max_shortage) * SHORTAGE_WEIGHT
        + calculate_demand_breadth_factor(so_count, total_open_sos) * DEMAND_BREADTH_WEIGHT
    )
    return min(max(score, 0.0), 100.0)


def get_priority_level(days: Optional[int]) -> PriorityLevel:
    """Display bucket from days until due. No due date is always LOW."""
    if days is None:
        return PriorityLevel.LOW
    if days <= 2:  # includes overdue
        return PriorityLevel.CRITICAL
    if days <= 7:
        return PriorityLevel.HIGH
    if days <= 14:
        return PriorityLevel.MEDIUM
    return PriorityLevel.LOW


def _parse_due_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # PostgREST returns ISO strings, sometimes with a time part
    return date.fromisoformat(str(value)[:10])


def score_row(
    row: dict,
    today: date,
    max_shortage: float,
    total_open_sos: int,
) -> UnfulfilledItem:
    """
    Build a scored item from one view row.

    The view's own due_date_factor column is ignored; the factor is always
    recomputed from earliest_due_date.
    """
    due_date = _parse_due_date(row.get("earliest_due_date"))
    days = days_until_due(due_date, today)
    shortage = float(row.get("shortage_quantity") or 0)
    so_count = int(row.get("number_of_sales_orders") or 0)

    return UnfulfilledItem(
        product_size_id=str(row["product_size_id"]),
        product_code=row.get("product_code") or "N/A",
        product_description=row.get("product_description") or "Unknown",
        product_id=row.get("product_id"),
        size_type=row.get("size_type") or None,
        total_quantity_needed=float(row.get("total_quantity_needed") or 0),
        total_available_stock=float(row.get("total_available_stock") or 0),
        shortage_quantity=shortage,
        earliest_due_date=due_date,
        number_of_sales_orders=so_count,
        sales_order_numbers=list(row.get("sales_order_numbers") or []),
        due_date_factor=calculate_due_date_factor(days),
        shortage_factor=calculate_shortage_factor(shortage, max_shortage),
        demand_breadth_factor=calculate_demand_breadth_factor(so_count, total_open_sos),
        priority_score=calculate_priority_score(days, shortage, max_shortage, so_count, total_open_sos),
        priority_level=get_priority_level(days),
    )


def get_normalizers(rows: list[dict]) -> tuple[float, int]:
    """
    Dataset-wide normalizers.

    Returns:
        (max_shortage, total_open_sos). total_open_sos is the largest
        sales-order count of any row, not a sum.
    """
    if not rows:
        return 0.0, 0
    max_shortage = max(float(r.get("shortage_quantity") or 0) for r in rows)
    total_open_sos = max(int(r.get("number_of_sales_orders") or 0) for r in rows)
    return max_shortage, total_open_sos


def score_unfulfilled_rows(rows: list[dict], today: date) -> list[UnfulfilledItem]:
    """Score every row and sort by priority_score descending (stable)."""
    if not rows:
        return []

    max_shortage, total_open_sos = get_normalizers(rows)
    items = [score_row(row, today, max_shortage, total_open_sos) for row in rows]
    items.sort(key=lambda item: item.priority_score, reverse=True)
    return items


def count_distinct_sales_orders(rows: list[dict]) -> int:
    """Distinct sales order numbers across all rows."""
    numbers = set()
    for row in rows:
        numbers.update(row.get("sales_order_numbers") or [])
    return len(numbers)


def summarize_levels(items: Iterable[UnfulfilledItem]) -> dict[str, int]:
    """Item count per priority level, every level present."""
    counts = {level.value: 0 for level in PriorityLevel}
    for item in items:
        counts[PriorityLevel(item.priority_level).value] += 1
    return counts


def build_unfulfilled_result(
    rows: list[dict],
    today: date,
    fetched_at: Optional[datetime] = None,
) -> UnfulfilledItemsResponse:
    """Full prioritized list for a set of view rows."""
    items = score_unfulfilled_rows(rows, today)
    _, total_open_sos = get_normalizers(rows)

    return UnfulfilledItemsResponse(
        items=items,
        total_count=len(items),
        total_open_sos=total_open_sos,
        distinct_sales_orders=count_distinct_sales_orders(rows),
        level_counts=summarize_levels(items),
        fetched_at=fetched_at,
    )


# ===================
# SERVICE
# ===================

class UnfulfilledOrderService:
    """
    Fetches, scores and caches the unfulfilled sales order list.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.view = VIEW_NAME
        self.cache_ttl = settings.unfulfilled_cache_ttl_seconds

    def fetch_rows(self) -> list[dict]:
        """
        Read every row of the unfulfilled view.

        Raises:
            DatabaseError: If the query fails
        """
        try:
            result = (
                self.db.table(self.view)
                .select("*")
                .order("earliest_due_date")
                .execute()
            )
        except Exception as e:
            logger.error("unfulfilled_view_query_failed", view=self.view, error=str(e))
            raise DatabaseError("select", str(e), details={"view": self.view})

        return result.data or []

    def get_unfulfilled_items(self, force_refresh: bool = False) -> UnfulfilledItemsResponse:
        """
        Get the prioritized unfulfilled list.

        Served from cache while younger than the TTL; otherwise refetched and
        recomputed in full. A failed fetch leaves the previous cache entry
        untouched.

        Args:
            force_refresh: Skip the cache

        Returns:
            UnfulfilledItemsResponse sorted by priority_score descending

        Raises:
            DatabaseError: If the view query fails
        """
        now = datetime.now()

        if not force_refresh:
            cached = cache_service.get_fresh(CACHE_KEY, self.cache_ttl, now)
            if cached is not None:
                logger.debug("unfulfilled_items_cache_hit", total_count=cached.total_count)
                return cached

        rows = self.fetch_rows()
        result = build_unfulfilled_result(rows, today=now.date(), fetched_at=now)
        cache_service.store(CACHE_KEY, result, fetched_at=now)

        logger.info(
            "unfulfilled_items_computed",
            total_count=result.total_count,
            total_open_sos=result.total_open_sos,
            critical=result.level_counts.get(PriorityLevel.CRITICAL.value, 0),
            forced=force_refresh,
        )

        return result

    def refresh(self) -> UnfulfilledItemsResponse:
        """Refetch and recompute unconditionally."""
        return self.get_unfulfilled_items(force_refresh=True)

    def invalidate(self) -> None:
        """Drop the cached list; the next read refetches."""
        cache_service.invalidate(CACHE_KEY)
        logger.debug("unfulfilled_items_cache_invalidated")


# Singleton instance
_unfulfilled_order_service: Optional[UnfulfilledOrderService] = None


def get_unfulfilled_order_service() -> UnfulfilledOrderService:
    """Get or create UnfulfilledOrderService instance."""
    global _unfulfilled_order_service
    if _unfulfilled_order_service is None:
        _unfulfilled_order_service = UnfulfilledOrderService()
    return _unfulfilled_order_service
