# src/config/orchestrator.py - v1
"""Runtime tuning knobs of the analysis orchestrator.

Unlike Settings, this model is cheap to copy and is what the orchestrator
consults at call time, so that update_config() can change it while the
process is running.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nutriscope.config.settings import ConfigurationError

if TYPE_CHECKING:
    from nutriscope.config.settings import Settings


class OrchestratorConfig(BaseModel):
    """Concurrency, retry, batching and cache knobs (milliseconds)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_concurrent_requests: int = Field(default=2, ge=1)
    request_timeout_ms: int = Field(default=60_000, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=2_000, ge=0)
    batch_size: int = Field(default=1, ge=1)
    rate_limit_delay_ms: int = Field(default=1_000, ge=0)
    cache_ttl_ms: int = Field(default=3_600_000, ge=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> OrchestratorConfig:
        """Pick the orchestrator fields out of application settings."""
        return cls(**{name: getattr(settings, name) for name in cls.model_fields})

    def updated(self, **partial: Any) -> OrchestratorConfig:
        """Return a new validated config with *partial* applied.

        Raises:
            ConfigurationError: On unknown keys or out-of-range values.
        """
        unknown = sorted(set(partial) - set(type(self).model_fields))
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        merged = {**self.model_dump(), **partial}
        try:
            return type(self)(**merged)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def request_timeout_s(self) -> float:
        return self.request_timeout_ms / 1000.0

    @property
    def retry_delay_s(self) -> float:
        return self.retry_delay_ms / 1000.0

    @property
    def rate_limit_delay_s(self) -> float:
        return self.rate_limit_delay_ms / 1000.0

    @property
    def cache_ttl_s(self) -> float:
        return self.cache_ttl_ms / 1000.0
