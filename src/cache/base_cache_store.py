# src/cache/base_cache_store.py - v2
"""Abstract cache store interface.

Stores are TTL-bound: an entry older than ``ttl_s`` is reported absent by
get() whether or not it has been physically removed yet.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable

from nutriscope.cache.models import CacheEntry
from nutriscope.core.models import OperationResult

DEFAULT_TTL_S = 3600.0


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    def __init__(
        self,
        ttl_s: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_s = ttl_s
        self._clock = clock

    @abstractmethod
    async def get(self, key: str) -> OperationResult | None:
        """Return the unexpired value for *key*, or None."""

    @abstractmethod
    async def put(self, key: str, value: OperationResult) -> None:
        """Store *value*, overwriting any entry for *key*."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove cache entry."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Eagerly remove expired entries; return how many were removed."""

    @abstractmethod
    def size(self) -> int:
        """Number of physically stored entries (expired ones included)."""

    def _new_entry(self, key: str, value: OperationResult) -> CacheEntry:
        return CacheEntry(key=key, value=value, stored_at=self._clock())

    def _expired(self, entry: CacheEntry) -> bool:
        return entry.is_expired(self.ttl_s, self._clock())
