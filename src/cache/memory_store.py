# src/cache/memory_store.py - v1
"""In-process cache store (default CACHE_BACKEND=memory).

Values are copied on the way in and out so callers can never mutate a
cached result in place.
"""

from __future__ import annotations

import logging
import threading

from nutriscope.cache.base_cache_store import BaseCacheStore
from nutriscope.cache.models import CacheEntry
from nutriscope.core.models import OperationResult

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed TTL cache with lazy expiry on read."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> OperationResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry):
                del self._entries[key]
                logger.debug("Cache entry expired: %s", key)
                return None
            return entry.value.model_copy(deep=True)

    async def put(self, key: str, value: OperationResult) -> None:
        entry = self._new_entry(key, value.model_copy(deep=True))
        with self._lock:
            self._entries[key] = entry

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def purge_expired(self) -> int:
        with self._lock:
            expired = [k for k, e in self._entries.items() if self._expired(e)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def size(self) -> int:
        return len(self._entries)
