"""
Unit tests for the in-memory list cache.

Run: pytest tests/unit/test_cache_service.py -v
"""

from datetime import datetime, timedelta

from services import cache_service
from services.cache_service import CacheEntry


NOW = datetime(2026, 10, 19, 9, 0, 0)


class TestCacheEntry:

    def test_fresh_within_ttl(self):
        entry = CacheEntry(value=[1], fetched_at=NOW)

        assert not entry.is_stale(NOW + timedelta(seconds=59), 60)

    def test_stale_at_ttl(self):
        entry = CacheEntry(value=[1], fetched_at=NOW)

        assert entry.is_stale(NOW + timedelta(seconds=60), 60)

    def test_age_seconds(self):
        entry = CacheEntry(value=None, fetched_at=NOW)

        assert entry.age_seconds(NOW + timedelta(seconds=42)) == 42


class TestCacheStore:

    def test_get_fresh_returns_value(self):
        cache_service.store("key", "value", fetched_at=NOW)

        assert cache_service.get_fresh("key", 60, now=NOW + timedelta(seconds=10)) == "value"

    def test_get_fresh_returns_none_when_stale(self):
        cache_service.store("key", "value", fetched_at=NOW)

        assert cache_service.get_fresh("key", 60, now=NOW + timedelta(minutes=2)) is None

    def test_stale_entry_still_available(self):
        cache_service.store("key", "value", fetched_at=NOW)

        entry = cache_service.get_entry("key")

        assert entry.value == "value"
        assert entry.fetched_at == NOW

    def test_missing_key(self):
        assert cache_service.get_fresh("missing", 60) is None
        assert cache_service.get_entry("missing") is None

    def test_store_replaces(self):
        cache_service.store("key", "old", fetched_at=NOW)
        cache_service.store("key", "new", fetched_at=NOW)

        assert cache_service.get_entry("key").value == "new"

    def test_invalidate(self):
        cache_service.store("key", "value")

        cache_service.invalidate("key")
        cache_service.invalidate("key")  # no error on missing

        assert cache_service.get_entry("key") is None

    def test_clear(self):
        cache_service.store("a", 1)
        cache_service.store("b", 2)

        cache_service.clear()

        assert cache_service.get_entry("a") is None
        assert cache_service.get_entry("b") is None
