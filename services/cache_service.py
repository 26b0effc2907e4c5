"""
In-memory cache for computed lists.
Each entry remembers when it was fetched; callers decide staleness with a TTL.
Single-process only, entries are lost on restart.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    fetched_at: datetime

    def is_stale(self, now: datetime, ttl_seconds: float) -> bool:
        """True once the entry is at least ttl_seconds old."""
        return now - self.fetched_at >= timedelta(seconds=ttl_seconds)

    def age_seconds(self, now: datetime) -> float:
        return (now - self.fetched_at).total_seconds()


_cache: dict[str, CacheEntry] = {}


def store(key: str, value: Any, fetched_at: Optional[datetime] = None) -> CacheEntry:
    """Replace the entry for key."""
    entry = CacheEntry(value=value, fetched_at=fetched_at or datetime.now())
    _cache[key] = entry
    return entry


def get_entry(key: str) -> Optional[CacheEntry]:
    """Return the entry for key, fresh or not. None if never stored."""
    return _cache.get(key)


def get_fresh(key: str, ttl_seconds: float, now: Optional[datetime] = None) -> Optional[Any]:
    """Return the cached value only while it is younger than ttl_seconds."""
    entry = _cache.get(key)
    if entry is None:
        return None
    if entry.is_stale(now or datetime.now(), ttl_seconds):
        return None
    return entry.value


def invalidate(key: str) -> None:
    _cache.pop(key, None)


def clear() -> None:
    """Drop every entry."""
    _cache.clear()
