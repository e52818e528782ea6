"""Bounded in-process memory cache.

Thread-safe key -> entry map with insertion-order eviction. This is the
first tier consulted on every request; it never survives a restart and
is never shared between processes.
"""

import logging
from collections import OrderedDict
from threading import Lock

from image_cache.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


class MemoryCache:
    """Insertion-ordered bounded cache.

    When inserting a new key would exceed ``capacity``, the oldest
    inserted surviving key is evicted. Reads do not refresh an entry's
    position, and re-inserting a present key leaves it untouched, so
    this is deliberately not an LRU.

    Example:
        ```python
        cache = MemoryCache(capacity=2)
        cache.put("a", entry_a)
        cache.put("b", entry_b)
        cache.get("a")           # does not protect "a"
        cache.put("c", entry_c)  # evicts "a"
        ```
    """

    def __init__(self, capacity: int = 100) -> None:
        """Initialize the memory cache.

        Args:
            capacity: Maximum number of entries to keep
        """
        if capacity < 1:
            raise ValueError("Memory cache capacity must be at least 1")
        self._capacity = capacity
        self._entries: OrderedDict[str, CacheEntryEntity] = OrderedDict()
        self._lock = Lock()

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return the entry for ``key``, or None."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CacheEntryEntity) -> None:
        """Insert an entry, evicting the oldest one if full."""
        with self._lock:
            if key in self._entries:
                return

            while len(self._entries) >= self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"[MemoryCache] Evicted: {evicted}")

            self._entries[key] = entry

    def keys(self) -> list[str]:
        """Keys in insertion order, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> int:
        """Drop all entries and return how many were removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "entries": len(self._entries),
                "capacity": self._capacity,
                "size_bytes": sum(e.size_bytes for e in self._entries.values()),
            }

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
