"""In-process cache backend."""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, Optional

from .base import DEFAULT_SOURCE_TAG, CacheEntry, CacheStore


class MemoryCacheStore(CacheStore):
    """Bounded dict with insertion-order eviction.

    When ``max_entries`` is reached the oldest inserted entry is dropped. This
    is not LRU: reads do not refresh an entry's position.
    """

    backend_kind = "memory"

    def __init__(
        self, max_entries: int = 1000, clock: Optional[Callable[[], float]] = None
    ) -> None:
        super().__init__(clock)
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self.now()):
                del self._entries[key]
                return None
            return copy.deepcopy(entry.data)

    def set(
        self,
        key: str,
        payload: Dict[str, Any],
        ttl: float,
        source_tag: str = DEFAULT_SOURCE_TAG,
    ) -> None:
        entry = self._new_entry(key, copy.deepcopy(payload), ttl, source_tag)
        with self._lock:
            # A rewrite counts as a fresh insertion.
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self.now()
        with self._lock:
            expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def entry_count(self) -> int:
        now = self.now()
        with self._lock:
            return sum(1 for entry in self._entries.values() if not entry.is_expired(now))
