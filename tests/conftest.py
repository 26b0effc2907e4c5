"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("UNFULFILLED_REFRESH_ENABLED", "false")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

from services import cache_service

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error
        self._is_single = False

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        for item in data:
            item["id"] = "test-uuid-123"
            item["created_at"] = datetime.utcnow().isoformat() + "Z"
        self._data = data
        return self

    def update(self, data):
        # Simulate update - merge with existing data
        updated_data = [{**item, **data} for item in self._data]
        self._data = updated_data if updated_data else [data]
        return self

    def eq(self, column, value):
        return self

    def gte(self, column, value):
        return self

    def lte(self, column, value):
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        if self._is_single:
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(data=data, count=1 if data else 0)
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(
            [dict(row) for row in self._data], self._count, self._error
        )

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        return self._query().update(data)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.requested_tables: list[str] = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query against a table raise."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        self.requested_tables.append(name)
        config = self._tables.get(name, {"data": [], "count": None, "error": None})
        return MockSupabaseTable(config["data"], config["count"], config["error"])


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def clear_cache():
    """Every test starts with an empty list cache."""
    cache_service.clear()
    yield
    cache_service.clear()


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("vw_unfulfilled_sales_order_items", [...])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("unfulfilled_so_acknowledgments", [...])
            # Now any service created afterwards gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.unfulfilled_order_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.acknowledgment_service.get_supabase_client", return_value=mock_supabase):
                with patch("services.auth_service.get_supabase_client", return_value=mock_supabase):
                    yield mock_supabase


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Not used as a context manager, so the lifespan (database check and
    scheduler) does not run.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/unfulfilled-orders")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
    app.dependency_overrides.clear()
