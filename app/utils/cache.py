# app/utils/cache.py
"""Per-instance LRU memo for row layout numbers with explicit invalidation and metrics."""

from __future__ import annotations

from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Hashable

RowKey = tuple[int, int]


class LayoutCache:
    """LRU cache keyed by ``(row_id, instance_count)``.

    Count-based keys go stale on position-only changes (moves), so callers
    must invalidate explicitly on every mutation.
    """

    def __init__(self, *, enabled: bool = True, maxsize: int = 256) -> None:
        """Initialize the layout cache.
        Args:
            enabled: Whether the cache is enabled
            maxsize: Maximum number of entries in the cache
        """
        self.enabled = enabled and maxsize > 0
        self.maxsize = max(1, maxsize) if self.enabled else 0
        self._store: OrderedDict[RowKey, Any] = OrderedDict()
        self._lock = Lock()

        # Metrics tracking
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._invalidations = 0

    @staticmethod
    def key_for(row_id: int, instance_count: int) -> RowKey:
        return (row_id, instance_count)

    def get(self, key: RowKey, loader: Callable[[], Any] | None = None) -> Any:
        """Get a cache entry by key, loading it if missing."""
        if not self.enabled:
            if loader:
                self._misses += 1
                return loader()
            return None

        with self._lock:
            if key in self._store:
                self._hits += 1
                self._store.move_to_end(key)
                return self._store[key]

        # Cache miss
        self._misses += 1

        if loader is None:
            return None

        value = loader()
        self.set(key, value)
        return value

    def set(self, key: RowKey, value: Any) -> None:
        """Set a cache entry with the given key and value."""
        if not self.enabled:
            return
        with self._lock:
            if value is None:
                self._store.pop(key, None)
                return
            self._store[key] = value
            self._store.move_to_end(key)
            if len(self._store) > self.maxsize:
                self._store.popitem(last=False)
                self._evictions += 1

    def invalidate(self, row_id: Hashable) -> None:
        """Drop every entry belonging to ``row_id``."""
        if not self.enabled:
            return
        with self._lock:
            stale = [key for key in self._store if key[0] == row_id]
            for key in stale:
                del self._store[key]
            self._invalidations += 1

    def invalidate_all(self) -> None:
        """Clear the entire cache."""
        if not self.enabled:
            return
        with self._lock:
            self._store.clear()
            self._invalidations += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with cache metrics including:
            - enabled: Whether cache is enabled
            - size: Current number of entries
            - maxsize: Maximum capacity
            - hits / misses: Lookup counters
            - hit_rate: Cache hit rate percentage (0-100)
            - evictions: Number of evictions due to size limit
            - invalidations: Number of invalidate/invalidate_all calls
        """
        with self._lock:
            size = len(self._store)
            hits = self._hits
            misses = self._misses
            evictions = self._evictions
            invalidations = self._invalidations

        total_requests = hits + misses
        hit_rate = (hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "enabled": self.enabled,
            "size": size,
            "maxsize": self.maxsize,
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hit_rate, 2),
            "evictions": evictions,
            "invalidations": invalidations,
        }
