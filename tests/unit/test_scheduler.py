"""
Unit tests for the background refresh scheduler.

Run: pytest tests/unit/test_scheduler.py -v
"""

import asyncio
from unittest.mock import MagicMock, patch

from config import settings
from jobs.scheduler import (
    scheduler,
    start_scheduler,
    shutdown_scheduler,
    refresh_unfulfilled_items,
    REFRESH_JOB_ID,
)
from exceptions import DatabaseError


class TestRefreshJob:

    def test_refreshes_list(self):
        service = MagicMock()
        service.refresh.return_value = MagicMock(total_count=3)

        with patch("jobs.scheduler.get_unfulfilled_order_service", return_value=service):
            refresh_unfulfilled_items()

        service.refresh.assert_called_once_with()

    def test_failure_does_not_escape_job(self):
        service = MagicMock()
        service.refresh.side_effect = DatabaseError("select", "timeout")

        with patch("jobs.scheduler.get_unfulfilled_order_service", return_value=service):
            refresh_unfulfilled_items()

        service.refresh.assert_called_once_with()


class TestSchedulerLifecycle:

    def test_start_registers_refresh_job(self):
        async def run():
            start_scheduler()
            try:
                assert scheduler.running
                job = scheduler.get_job(REFRESH_JOB_ID)
                assert job is not None
                assert job.trigger.interval.total_seconds() == settings.unfulfilled_refresh_interval_seconds
            finally:
                shutdown_scheduler()

        asyncio.run(run())

        assert not scheduler.running

    def test_shutdown_when_not_running(self):
        shutdown_scheduler()

        assert not scheduler.running
