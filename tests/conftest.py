# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides scripted fake LLM clients, a controllable clock, small
millisecond-level orchestrator configs and pre-wired runners.
No network access: every backend is faked.
"""

from __future__ import annotations

import logging

import pytest
from fakes import FakeClock, FakeLLMClient

from nutriscope.cache.memory_store import MemoryCacheStore
from nutriscope.config.orchestrator import OrchestratorConfig
from nutriscope.config.settings import Settings
from nutriscope.llm.base_client import BaseLLMClient
from nutriscope.llm.gate import ConcurrencyGate
from nutriscope.logging.logger import ROOT_LOGGER
from nutriscope.pipeline.runner import OperationRunner
from nutriscope.tracking.call_logger import CallLogger
from nutriscope.tracking.metrics_recorder import MetricsRecorder

# === FIXTURES ===


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo any setup_logging() handlers installed by a test."""
    yield
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def settings() -> Settings:
    """Default settings without .env or environment lookups (mock backend)."""
    return Settings.model_construct()


@pytest.fixture
def fast_config() -> OrchestratorConfig:
    """Small millisecond-level knobs so timing tests stay quick."""
    return OrchestratorConfig(
        max_concurrent_requests=2,
        request_timeout_ms=1_000,
        retry_attempts=3,
        retry_delay_ms=10,
        batch_size=1,
        rate_limit_delay_ms=0,
        cache_ttl_ms=60_000,
    )


@pytest.fixture
def fake_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_runner(fast_config: OrchestratorConfig):
    """Factory building an OperationRunner around a given backend."""

    def _make(
        backend: BaseLLMClient,
        config: OrchestratorConfig | None = None,
        call_logger: CallLogger | None = None,
    ) -> OperationRunner:
        config = config or fast_config
        return OperationRunner(
            backend=backend,
            cache=MemoryCacheStore(ttl_s=config.cache_ttl_s),
            metrics=MetricsRecorder(),
            gate=ConcurrencyGate(
                max_concurrent=config.max_concurrent_requests,
                rate_limit_delay_s=config.rate_limit_delay_s,
            ),
            config=config,
            call_logger=call_logger,
        )

    return _make
