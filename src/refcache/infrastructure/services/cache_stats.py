"""Cache statistics collector.

Tracks ``hit`` / ``miss`` counts, supplier invocations and reclaimed
entries for named caches.  Thread-safe; one collector is shared by every
cache built from the same :class:`~refcache.appctx.CacheContext`.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStats:
    """Immutable snapshot of cache statistics."""

    hits: int = 0
    misses: int = 0
    computations: int = 0
    reclaimed: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate as a float in [0.0, 1.0]; 0.0 when no requests."""
        if self.total == 0:
            return 0.0
        return self.hits / self.total


class CacheStatsCollector:
    """Thread-safe collector for per-cache counters.

    Usage::

        stats = CacheStatsCollector()
        stats.record_hit("fields")
        stats.record_miss("fields")
        print(stats.get("fields").hit_rate)
    """

    _FIELDS = ("hits", "misses", "computations", "reclaimed")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, Counter[str]] = {}

    def _bump(self, cache_name: str, field: str, amount: int) -> None:
        with self._lock:
            counter = self._counters.get(cache_name)
            if counter is None:
                counter = self._counters[cache_name] = Counter()
            counter[field] += amount

    def record_hit(self, cache_name: str) -> None:
        """Record a cache hit for *cache_name*."""
        self._bump(cache_name, "hits", 1)

    def record_miss(self, cache_name: str) -> None:
        """Record a cache miss for *cache_name*."""
        self._bump(cache_name, "misses", 1)

    def record_computation(self, cache_name: str) -> None:
        """Record one supplier invocation for *cache_name*."""
        self._bump(cache_name, "computations", 1)

    def record_reclaimed(self, cache_name: str, count: int = 1) -> None:
        """Record *count* entries dropped because their key was collected."""
        if count:
            self._bump(cache_name, "reclaimed", count)

    def _snapshot(self, cache_name: str) -> CacheStats:
        counter = self._counters.get(cache_name, Counter())
        return CacheStats(**{name: counter[name] for name in self._FIELDS})

    def get(self, cache_name: str) -> CacheStats:
        """Return a :class:`CacheStats` snapshot for *cache_name*."""
        with self._lock:
            return self._snapshot(cache_name)

    def all(self) -> dict[str, CacheStats]:
        """Return snapshots for every cache that has recorded data."""
        with self._lock:
            return {name: self._snapshot(name) for name in sorted(self._counters)}

    def reset(self, cache_name: str | None = None) -> None:
        """Reset counters.  If *cache_name* is ``None``, reset all."""
        with self._lock:
            if cache_name is None:
                self._counters.clear()
            else:
                self._counters.pop(cache_name, None)
