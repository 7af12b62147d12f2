# src/api/models.py - v2
"""API-level models: ConfigOverrides."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ConfigOverrides(BaseModel):
    """Partial orchestrator config; None fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    max_concurrent_requests: int | None = None
    request_timeout_ms: int | None = None
    retry_attempts: int | None = None
    retry_delay_ms: int | None = None
    batch_size: int | None = None
    rate_limit_delay_ms: int | None = None
    cache_ttl_ms: int | None = None

    def as_update(self) -> dict[str, int]:
        return self.model_dump(exclude_none=True)
