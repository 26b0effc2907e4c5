"""
Unfulfilled sales orders API routes.

Prioritized shortage list plus the acknowledgment workflow:
acknowledge the list, link it to a work order, check today's
acknowledgment, browse and export the history.
"""

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse, StreamingResponse
from typing import Optional
from datetime import date
import structlog

from models.unfulfilled_order import (
    UnfulfilledItemsResponse,
    AcknowledgmentCreate,
    AcknowledgmentResponse,
    AcknowledgmentListResponse,
    WorkOrderLinkRequest,
)
from services.unfulfilled_order_service import get_unfulfilled_order_service
from services.acknowledgment_service import get_acknowledgment_service
from services.export_service import get_export_service, export_filename
from services.auth_service import extract_bearer_token, resolve_user_id, require_user_id
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/unfulfilled-orders", tags=["Unfulfilled Orders"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# DEPENDENCIES
# ===================

def get_current_user_id(
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    """User UUID from the Supabase access token, None if anonymous."""
    return resolve_user_id(extract_bearer_token(authorization))


def require_current_user_id(
    user_id: Optional[str] = Depends(get_current_user_id),
) -> str:
    """Signed-in user UUID. Raises AuthenticationError (401) if anonymous."""
    return require_user_id(user_id)


# ===================
# PRIORITIZED LIST
# ===================

@router.get("", response_model=UnfulfilledItemsResponse)
async def get_unfulfilled_items():
    """
    Get the prioritized unfulfilled sales order list.

    Sorted by priority_score (highest first). Cached for 60 seconds and
    refreshed in the background on the same interval.
    """
    try:
        service = get_unfulfilled_order_service()
        return service.get_unfulfilled_items()

    except Exception as e:
        return handle_error(e)


@router.post("/refresh", response_model=UnfulfilledItemsResponse)
async def refresh_unfulfilled_items():
    """
    Refetch and recompute the list now, ignoring the cache.
    """
    try:
        service = get_unfulfilled_order_service()
        return service.refresh()

    except Exception as e:
        return handle_error(e)


# ===================
# ACKNOWLEDGMENTS
# ===================

@router.post("/acknowledgments", response_model=AcknowledgmentResponse, status_code=201)
async def create_acknowledgment(
    data: AcknowledgmentCreate,
    user_id: str = Depends(require_current_user_id),
):
    """
    Acknowledge the prioritized list.

    Requires a signed-in user (401 otherwise, before anything is stored).
    Stores an immutable snapshot of the submitted items as given.
    """
    try:
        service = get_acknowledgment_service()
        return service.create_acknowledgment(user_id, data.items, data.notes)

    except Exception as e:
        return handle_error(e)


@router.get("/acknowledgments", response_model=AcknowledgmentListResponse)
async def list_acknowledgments(
    user_id: Optional[str] = Query(None, description="Filter by user"),
    start_date: Optional[date] = Query(None, description="From this day (inclusive)"),
    end_date: Optional[date] = Query(None, description="Through this day (inclusive)"),
):
    """
    Acknowledgment history, newest first.
    """
    try:
        service = get_acknowledgment_service()
        acknowledgments = service.get_history(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
        )
        return AcknowledgmentListResponse(
            data=acknowledgments,
            total=len(acknowledgments),
        )

    except Exception as e:
        return handle_error(e)


@router.get("/acknowledgments/today", response_model=Optional[AcknowledgmentResponse])
async def get_todays_acknowledgment(
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    The current user's latest acknowledgment since local midnight.

    Returns null when there is none (or no signed-in user).
    """
    try:
        service = get_acknowledgment_service()
        return service.get_todays_acknowledgment(user_id)

    except Exception as e:
        return handle_error(e)


@router.get("/acknowledgments/export")
async def export_acknowledgments(
    user_id: Optional[str] = Query(None, description="Filter by user"),
    start_date: Optional[date] = Query(None, description="From this day (inclusive)"),
    end_date: Optional[date] = Query(None, description="Through this day (inclusive)"),
):
    """
    Download the acknowledgment history as an Excel file.
    """
    try:
        acknowledgments = get_acknowledgment_service().get_history(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
        )
        output = get_export_service().generate_acknowledgments_excel(acknowledgments)

        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
        )

    except Exception as e:
        return handle_error(e)


@router.patch("/acknowledgments/{acknowledgment_id}/work-order", status_code=204)
async def link_acknowledgment_to_work_order(
    acknowledgment_id: str,
    data: WorkOrderLinkRequest,
):
    """
    Link an acknowledgment to the work order created from it.

    If the acknowledgment is linked but the work order cannot be flagged,
    responds 500 with code WORK_ORDER_LINK_INCOMPLETE.
    """
    try:
        service = get_acknowledgment_service()
        service.link_to_work_order(acknowledgment_id, data.work_order_id)
        return None

    except Exception as e:
        return handle_error(e)
