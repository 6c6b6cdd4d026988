"""
Result cache - memoizes evaluations keyed by the input digest
"""

import time
import threading
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Share of the least-accessed entries dropped when the cache is full
EVICTION_FRACTION = 0.3

@dataclass
class _CacheEntry:
    value: Any
    created_at: float
    access_count: int = 1

class ResultCache:
    """
    Thread-safe TTL cache holding at most one entry per key

    `put` is insert-if-absent: when two callers race on the same key the
    first stored value wins and is returned to both.
    """

    def __init__(self, max_size: int = 200, ttl_seconds: float = 900.0,
                 clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError(f"Invalid cache size: {max_size}")
        if ttl_seconds <= 0:
            raise ValueError(f"Invalid cache TTL: {ttl_seconds}")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _is_fresh(self, entry: _CacheEntry) -> bool:
        return (self._clock() - entry.created_at) < self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry):
                entry.access_count += 1
                self._hits += 1
                return entry.value
            if entry is not None:
                del self._entries[key]
            self._misses += 1
            return None

    def put(self, key: str, value: T) -> T:
        """Store `value` unless a fresh entry exists; return the stored value"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry):
                return entry.value

            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict()

            self._entries[key] = _CacheEntry(value=value, created_at=self._clock())
            return value

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key[:12]}")
            return cached
        logger.debug(f"Cache miss for {key[:12]}")
        # Computed outside the lock; put() keeps whichever value landed first
        return self.put(key, compute())

    def _evict(self) -> None:
        """Drop expired entries, then the least-accessed share if still full"""
        expired = [k for k, e in self._entries.items() if not self._is_fresh(e)]
        for key in expired:
            del self._entries[key]

        if len(self._entries) < self.max_size:
            return

        ranked = sorted(self._entries.items(), key=lambda item: item[1].access_count)
        to_remove = max(1, int(len(ranked) * EVICTION_FRACTION))
        for key, _ in ranked[:to_remove]:
            del self._entries[key]

        logger.debug(f"Evicted {len(expired)} expired and {to_remove} least-accessed entries")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / lookups if lookups else 0.0,
                "utilization": round(len(self._entries) / self.max_size * 100)
            }
