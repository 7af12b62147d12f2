# src/cache/models.py - v2
"""Cache domain model: CacheEntry."""

from __future__ import annotations

from pydantic import BaseModel

from nutriscope.core.models import OperationResult


class CacheEntry(BaseModel):
    """Single cached operation result.

    ``stored_at`` is wall-clock seconds since the epoch so that entries
    persisted by the JSON store stay meaningful across processes.
    """

    key: str
    value: OperationResult
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_expired(self, ttl_s: float, now: float) -> bool:
        """Expired once strictly older than *ttl_s*."""
        return self.age(now) > ttl_s
