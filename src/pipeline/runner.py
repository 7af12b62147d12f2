# src/pipeline/runner.py - v3
"""Operation runner: the per-request pipeline shared by all operations.

    cache lookup → gate acquire → retrying call → parse → cache store → metrics

A cache hit returns immediately without touching the gate or the backend.
On a miss, each endpoint attempt holds its own gate slot (released before
any backoff sleep) and is bounded by the per-call timeout. The mock
backend bypasses gate, retry and timeout but goes through the same cache,
parse and metrics steps, so callers only see a difference in content.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from nutriscope.cache.fingerprint import request_cache_key
from nutriscope.core.models import Operation, OperationRequest, OperationResult
from nutriscope.core.parsing import parse_operation_response
from nutriscope.llm.retry import RetryConfig, RetryExecutor
from nutriscope.logging.context import request_context
from nutriscope.pipeline.prompt_builder import build_prompt

if TYPE_CHECKING:
    from nutriscope.cache.base_cache_store import BaseCacheStore
    from nutriscope.config.orchestrator import OrchestratorConfig
    from nutriscope.llm.base_client import BaseLLMClient
    from nutriscope.llm.gate import ConcurrencyGate
    from nutriscope.llm.models import LLMResponse
    from nutriscope.tracking.call_logger import CallLogger
    from nutriscope.tracking.metrics_recorder import MetricsRecorder

logger = logging.getLogger(__name__)


class OperationRunner:
    """Execute single OperationRequests against one backend.

    Args:
        backend: Real or mock LLM client, fixed for the runner's lifetime.
        cache: Result cache.
        metrics: Shared counters.
        gate: Concurrency/pacing gate for real endpoint calls.
        config: Tuning knobs; read once per request, so replacing it only
            affects requests that start afterwards.
        call_logger: Optional per-attempt call log.
        clock: Monotonic clock for latency measurement.
        sleep: Backoff sleep, replaceable in tests.
    """

    def __init__(
        self,
        backend: BaseLLMClient,
        cache: BaseCacheStore,
        metrics: MetricsRecorder,
        gate: ConcurrencyGate,
        config: OrchestratorConfig,
        call_logger: CallLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self._cache = cache
        self._metrics = metrics
        self._gate = gate
        self.config = config
        self._call_logger = call_logger
        self._clock = clock
        self._sleep = sleep
        # Strategy chosen once: no per-call mock branching.
        self._call = self._call_direct if backend.is_mock else self._call_throttled

    @property
    def backend(self) -> BaseLLMClient:
        return self._backend

    async def execute(self, request: OperationRequest) -> OperationResult:
        """Run *request* and return its parsed result.

        Raises:
            Exception: The last endpoint error once retries are exhausted.
        """
        key = request_cache_key(request)
        with request_context(request.operation.value):
            cached = await self._cache.get(key)
            if cached is not None:
                self._metrics.record_cache_hit()
                logger.debug("Cache hit: %s", key)
                return cached

            self._metrics.record_cache_miss()
            logger.debug("Cache miss: %s", key)

            start = self._clock()
            prompt = build_prompt(request)
            try:
                response, latency_ms = await self._call(request.operation, prompt, start)
            except (Exception, asyncio.CancelledError):
                # A caller deadline cancels mid-call; it still counts as a failed request.
                self._metrics.record_outcome(self._elapsed_ms(start), success=False)
                raise

            result = parse_operation_response(request.operation, response.content)
            await self._cache.put(key, result)
            self._metrics.record_outcome(latency_ms, success=True)
            return result

    # --- Call strategies ---

    async def _call_direct(
        self, operation: Operation, prompt: str, start: float
    ) -> tuple[LLMResponse, float]:
        response = await self._backend.generate(prompt)
        self._record_call(operation, 1, response.latency_ms, "success", response=response)
        return response, float(response.latency_ms)

    async def _call_throttled(
        self, operation: Operation, prompt: str, start: float
    ) -> tuple[LLMResponse, float]:
        config = self.config
        executor = RetryExecutor(
            RetryConfig(attempts=config.retry_attempts, base_delay_s=config.retry_delay_s),
            label=operation.value,
            sleep=self._sleep,
        )
        attempt_no = 0

        async def attempt() -> LLMResponse:
            nonlocal attempt_no
            attempt_no += 1
            async with self._gate.slot():
                t0 = self._clock()
                try:
                    response = await asyncio.wait_for(
                        self._backend.generate(prompt),
                        timeout=config.request_timeout_s,
                    )
                except Exception as e:
                    status = "retry" if attempt_no < config.retry_attempts else "failed"
                    self._record_call(operation, attempt_no, self._elapsed_ms(t0), status, error=e)
                    raise
            self._record_call(operation, attempt_no, self._elapsed_ms(t0), "success", response=response)
            return response

        response = await executor.run(attempt)
        return response, self._elapsed_ms(start)

    # --- Helpers ---

    def _elapsed_ms(self, since: float) -> float:
        return (self._clock() - since) * 1000.0

    def _record_call(
        self,
        operation: Operation,
        attempt: int,
        latency_ms: float,
        status: str,
        response: LLMResponse | None = None,
        error: BaseException | None = None,
    ) -> None:
        if self._call_logger is None:
            return
        self._call_logger.record(
            operation=operation.value,
            provider=self._backend.provider_name,
            model=self._backend.model_name,
            attempt=attempt,
            latency_ms=int(latency_ms),
            status=status,
            response=response,
            error=error,
        )
