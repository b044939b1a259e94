"""
Process-wide cache for the unfiltered search total

Only queries without predicates read or write this cache. Entries expire
after a TTL and are never invalidated explicitly. Concurrent invocations may
overwrite each other; they all store the same value.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

# Support both Lambda deployment and local development
try:
    import config
except ImportError:
    import index_backend.config as config


@dataclass(frozen=True)
class CachedCount:
    value: int
    computed_at: float


class CountCache:
    """TTL cache holding a single row count."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entry: CachedCount | None = None

    def get(self) -> int | None:
        """Return the cached count, or None if absent or expired."""
        entry = self._entry
        if entry is None:
            return None
        if self.clock() - entry.computed_at >= self.ttl_seconds:
            return None
        return entry.value

    def set(self, value: int) -> None:
        self._entry = CachedCount(value=value, computed_at=self.clock())

    def clear(self) -> None:
        self._entry = None


count_cache = CountCache(config.COUNT_CACHE_TTL_SECONDS)
