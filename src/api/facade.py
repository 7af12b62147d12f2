# src/api/facade.py - v2
"""Public API facade: one orchestrator instance per configuration.

Usage:
    from nutriscope.api.facade import create_orchestrator
    orchestrator = create_orchestrator()
    result = await orchestrator.analyze(text, source_type="paper")

The orchestrator owns its cache, metrics, gate and backend; nothing is
shared through module globals, so several independently configured
orchestrators can live in one process.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence, TypeVar

from nutriscope.api.models import ConfigOverrides
from nutriscope.batch.coordinator import BatchCoordinator
from nutriscope.cache.cache_factory import create_cache_store
from nutriscope.config.orchestrator import OrchestratorConfig
from nutriscope.config.settings import Settings
from nutriscope.core.models import (
    AnalysisResult,
    FactsResult,
    Operation,
    OperationRequest,
    OperationResult,
    TagsResult,
)
from nutriscope.llm.client_factory import create_llm_client
from nutriscope.llm.gate import ConcurrencyGate
from nutriscope.pipeline.runner import OperationRunner
from nutriscope.tracking.call_logger import CallLogger
from nutriscope.tracking.metrics_recorder import MetricsRecorder
from nutriscope.tracking.models import MetricsSnapshot, PerformanceStats

if TYPE_CHECKING:
    from nutriscope.batch.models import BatchItem, BatchResult
    from nutriscope.cache.base_cache_store import BaseCacheStore
    from nutriscope.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalysisOrchestrator:
    """Cached, throttled, retrying access to the AI endpoint.

    Args:
        settings: Application settings. Loaded from .env if None.
        config: Tuning knobs. Derived from settings if None.
        backend: LLM client. Selected from settings if None (mock when no
            credential is configured).
        cache_store: Result cache. Built from settings if None.
        call_logger: Per-attempt call log. A fresh one if None.
        mock_mode: Force the mock backend (ignored when backend is given).
        sleep: Awaitable sleep used for backoff and batch pauses.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        config: OrchestratorConfig | None = None,
        backend: BaseLLMClient | None = None,
        cache_store: BaseCacheStore | None = None,
        call_logger: CallLogger | None = None,
        mock_mode: bool = False,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        settings = settings or Settings()
        self._config = config or OrchestratorConfig.from_settings(settings)
        self._backend = backend or create_llm_client(settings, force_mock=mock_mode)
        self._cache = cache_store or create_cache_store(settings)
        self._cache.ttl_s = self._config.cache_ttl_s
        self._metrics = MetricsRecorder()
        self._call_logger = call_logger or CallLogger()
        self._gate = ConcurrencyGate(
            max_concurrent=self._config.max_concurrent_requests,
            rate_limit_delay_s=self._config.rate_limit_delay_s,
        )
        self._runner = OperationRunner(
            backend=self._backend,
            cache=self._cache,
            metrics=self._metrics,
            gate=self._gate,
            config=self._config,
            call_logger=self._call_logger,
            sleep=sleep,
        )
        self._batch = BatchCoordinator(self._runner, sleep=sleep)

        logger.info(
            "Orchestrator ready: provider=%s, model=%s, concurrency=%d",
            self._backend.provider_name,
            self._backend.model_name,
            self._config.max_concurrent_requests,
        )

    # --- Introspection ---

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def is_mock(self) -> bool:
        return self._backend.is_mock

    @property
    def call_logger(self) -> CallLogger:
        return self._call_logger

    # --- Operations ---

    async def execute(
        self, request: OperationRequest, timeout: float | None = None
    ) -> OperationResult:
        """Run one request, optionally bounded by a caller deadline (seconds)."""
        return await self._with_deadline(self._runner.execute(request), timeout)

    async def analyze(
        self,
        content: str,
        source_type: str = "general",
        timeout: float | None = None,
    ) -> AnalysisResult:
        """Summarize nutrition content.

        Args:
            content: Raw text.
            source_type: paper, youtube, news or general.
            timeout: Optional overall deadline in seconds.

        Raises:
            Exception: The last endpoint error once retries are exhausted.
            asyncio.TimeoutError: If *timeout* elapses first.
        """
        request = OperationRequest.create(Operation.ANALYZE, content, source_type)
        return await self.execute(request, timeout)  # type: ignore[return-value]

    async def extract_facts(
        self, content: str, timeout: float | None = None
    ) -> FactsResult:
        """Extract structured nutrition facts from *content*."""
        request = OperationRequest.create(Operation.EXTRACT_FACTS, content)
        return await self.execute(request, timeout)  # type: ignore[return-value]

    async def generate_tags(
        self, content: str, timeout: float | None = None
    ) -> list[str]:
        """Generate up to eight tags for *content*."""
        request = OperationRequest.create(Operation.GENERATE_TAGS, content)
        result: TagsResult = await self.execute(request, timeout)  # type: ignore[assignment]
        return list(result.tags)

    async def process_batch(
        self,
        items: Sequence[BatchItem | str],
        operation: Operation | str = Operation.ANALYZE,
        batch_size: int | None = None,
        timeout: float | None = None,
    ) -> list[BatchResult]:
        """Run *operation* over *items*; one result per item, in order."""
        return await self._with_deadline(
            self._batch.process_batch(items, operation, batch_size=batch_size),
            timeout,
        )

    # --- Metrics & cache ---

    def get_metrics(self) -> MetricsSnapshot:
        return self._metrics.snapshot()

    def get_performance_stats(self) -> PerformanceStats:
        """Counters plus live gate and cache state, formatted for display."""
        return PerformanceStats.build(
            self._metrics.snapshot(),
            active_requests=self._gate.active,
            queue_length=self._gate.queue_length,
            cache_size=self._cache.size(),
        )

    def reset_metrics(self) -> None:
        self._metrics.reset()
        logger.info("Metrics reset")

    async def clear_cache(self) -> None:
        await self._cache.clear()
        logger.info("Response cache cleared")

    async def cleanup_cache(self) -> int:
        """Purge expired entries now; returns how many were removed."""
        removed = await self._cache.purge_expired()
        logger.debug("Purged %d expired cache entries", removed)
        return removed

    # --- Configuration ---

    def update_config(
        self, overrides: ConfigOverrides | None = None, **partial: Any
    ) -> OrchestratorConfig:
        """Apply a partial config update to the live orchestrator.

        Requests already in flight keep the values they started with.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        update = overrides.as_update() if overrides is not None else {}
        update.update(partial)
        new_config = self._config.updated(**update)

        self._gate.resize(new_config.max_concurrent_requests)
        self._gate.rate_limit_delay_s = new_config.rate_limit_delay_s
        self._cache.ttl_s = new_config.cache_ttl_s
        self._runner.config = new_config
        self._config = new_config

        logger.info("Orchestrator configuration updated: %s", new_config.model_dump())
        return new_config

    @staticmethod
    async def _with_deadline(coro: Awaitable[T], timeout: float | None) -> T:
        if timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=timeout)


def create_orchestrator(
    settings: Settings | None = None, **kwargs: Any
) -> AnalysisOrchestrator:
    """Build an orchestrator from settings (loaded from .env if None)."""
    return AnalysisOrchestrator(settings=settings, **kwargs)
