# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: the Gemini
credential, generation parameters, orchestrator tuning knobs, cache backend
and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDER ===
    llm_provider: str = "google"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.7
    llm_top_k: int = 40
    llm_top_p: float = 0.95
    llm_max_output_tokens: int = 2048

    # Provider API key (empty = mock mode)
    gemini_api_key: str = ""

    # Force the deterministic backend even when a key is configured
    mock_mode: bool = False

    # === Orchestrator ===
    max_concurrent_requests: int = 2
    request_timeout_ms: int = 60_000
    retry_attempts: int = 3
    retry_delay_ms: int = 2_000
    batch_size: int = 1
    rate_limit_delay_ms: int = 1_000
    cache_ttl_ms: int = 3_600_000

    # === Cache ===
    cache_backend: Literal["memory", "json"] = "memory"
    cache_root: Path = Path("~/.nutriscope/cache")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("gemini_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:  # noqa: N805
        """Surrounding whitespace in .env values is never part of the key."""
        return v.strip()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate numeric ranges of the orchestrator knobs."""
        errors: list[str] = []

        if self.max_concurrent_requests < 1:
            errors.append("MAX_CONCURRENT_REQUESTS must be >= 1")
        if self.batch_size < 1:
            errors.append("BATCH_SIZE must be >= 1")
        if self.retry_attempts < 1:
            errors.append("RETRY_ATTEMPTS must be >= 1")
        if self.request_timeout_ms <= 0:
            errors.append("REQUEST_TIMEOUT_MS must be > 0")
        for name in ("retry_delay_ms", "rate_limit_delay_ms", "cache_ttl_ms"):
            if getattr(self, name) < 0:
                errors.append(f"{name.upper()} must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def has_credentials(self) -> bool:
        """Whether a usable Gemini key is configured."""
        return bool(self.gemini_api_key)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
