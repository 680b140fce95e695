# core/cache.py

"""
In-memory TTL cache used by the permission resolver.

The cache is a read-through accelerator only: a miss (or an expired entry)
always falls through to storage. Instances are injected rather than shared
as module state so their lifecycle (size bound, clearing) stays explicit.
"""

import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Optional

from core.logging_config import logger


class CacheEntry:
    """Represents a cached value with expiration time."""

    def __init__(self, value: Any, ttl_seconds: float, now: float):
        self.value = value
        self.expires_at = now + ttl_seconds

    def is_expired(self, now: float) -> bool:
        """Check if the cache entry has expired."""
        return now >= self.expires_at


class TTLCache:
    """
    Bounded in-memory cache with TTL support.

    Safe for concurrent access; last writer wins. When full, the least
    recently written entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        """Value stored under ``key``, or None when absent or expired. Expired entries are dropped on read."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._clock()):
                del self._cache[key]
                return None

            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None):
        """
        Store ``value`` for ``ttl_seconds`` (the cache default when omitted).
        A non-positive TTL disables caching for this write.
        """
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return

        with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = CacheEntry(value, ttl, self._clock())
            while len(self._cache) > self.max_entries:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Cache full, evicted: {evicted}")

    def delete(self, key: str):
        with self._lock:
            self._cache.pop(key, None)

    def clear(self):
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()

    def cleanup_expired(self) -> int:
        """Remove all expired entries from the cache. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items()
                if entry.is_expired(now)
            ]
            for key in expired_keys:
                del self._cache[key]
            return len(expired_keys)

    def size(self) -> int:
        """Get the number of entries in the cache (expired ones included until touched)."""
        with self._lock:
            return len(self._cache)
