"""
APScheduler configuration.

Keeps the unfulfilled sales order list warm: every
unfulfilled_refresh_interval_seconds the view is refetched and the list
recomputed, independent of any client polling.
"""

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from config import settings
from services.unfulfilled_order_service import get_unfulfilled_order_service

logger = structlog.get_logger(__name__)

REFRESH_JOB_ID = "refresh_unfulfilled_items"

jobstores = {
    "default": MemoryJobStore()
}

# Sync jobs run in the event loop's default thread pool
executors = {
    "default": AsyncIOExecutor(),
}

job_defaults = {
    "coalesce": True,  # Combine missed runs into one
    "max_instances": 1,  # At most one refresh in flight
    "misfire_grace_time": 60,
}

scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
)


def refresh_unfulfilled_items() -> None:
    """
    Scheduled refresh of the unfulfilled list.

    A failed refresh keeps the previous cached list; the next run retries.
    """
    try:
        result = get_unfulfilled_order_service().refresh()
        logger.info(
            "scheduled_refresh_complete",
            job=REFRESH_JOB_ID,
            total_count=result.total_count
        )
    except Exception as e:
        logger.error(
            "scheduled_refresh_failed",
            job=REFRESH_JOB_ID,
            error=str(e),
            error_type=type(e).__name__
        )


def start_scheduler() -> None:
    """Start the scheduler and register the refresh job."""
    if scheduler.running:
        return

    scheduler.add_job(
        refresh_unfulfilled_items,
        "interval",
        seconds=settings.unfulfilled_refresh_interval_seconds,
        id=REFRESH_JOB_ID,
        name="Refresh Unfulfilled Sales Orders",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        "scheduler_started",
        jobs=[job.id for job in scheduler.get_jobs()],
        interval_seconds=settings.unfulfilled_refresh_interval_seconds
    )


def shutdown_scheduler() -> None:
    """Stop the scheduler; pending runs are dropped."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
