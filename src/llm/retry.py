# src/llm/retry.py - v2
"""Bounded retry with exponential backoff around a single endpoint call.

The executor knows nothing about caching or concurrency: it calls an async
action, and on any exception waits ``retry_delay * 2**(n-1)`` before attempt
n+1. After the last attempt the last exception is re-raised unchanged.

Every failure is retried the same way, authentication errors included.
classify_error() only labels the log line.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy: total attempts and backoff base."""

    attempts: int = 3
    base_delay_s: float = 2.0
    backoff_factor: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Backoff after failed *attempt* (1-based)."""
        return self.base_delay_s * (self.backoff_factor ** (attempt - 1))


def classify_error(error: BaseException) -> str:
    """Classify an exception into a coarse error type for diagnostics."""
    msg = str(error).lower()
    name = type(error).__name__.lower()

    if "timeout" in name or "timeout" in msg or isinstance(error, asyncio.TimeoutError):
        return "timeout"
    if "429" in msg or "rate" in msg or "quota" in msg:
        return "rate_limit"
    if "401" in msg or "403" in msg or "api key" in msg or "permission" in msg:
        return "auth"
    if any(c in msg for c in ("500", "502", "503", "504", "server")):
        return "server_error"
    if "json" in msg or "parse" in msg or "decode" in msg:
        return "parse_error"
    return "unknown"


class RetryExecutor:
    """Run an async action with bounded retries.

    Args:
        config: Attempt budget and backoff base.
        label: Name used in log lines (operation name).
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        label: str = "llm",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config or RetryConfig()
        self._label = label
        self._sleep = sleep

    async def run(
        self,
        action: Callable[[], Awaitable[T]],
        on_failure: Callable[[int, BaseException], None] | None = None,
    ) -> T:
        """Execute *action*, retrying on any exception.

        Args:
            action: Zero-argument coroutine factory; one network call per call.
            on_failure: Optional hook called as (attempt, error) after each
                failed attempt, before any backoff.

        Raises:
            Exception: The last error once all attempts are used.
        """
        config = self.config
        attempt = 0

        while True:
            attempt += 1
            try:
                return await action()
            except Exception as e:
                if on_failure is not None:
                    on_failure(attempt, e)

                if attempt >= config.attempts:
                    logger.error(
                        "'%s' failed after %d attempt(s) (%s): %s",
                        self._label, attempt, classify_error(e), e,
                    )
                    raise

                delay = config.delay_for(attempt)
                logger.warning(
                    "'%s' %s (attempt %d/%d), retrying in %.1fs",
                    self._label, classify_error(e), attempt, config.attempts, delay,
                )
                await self._sleep(delay)


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    label: str = "llm",
    config: RetryConfig | None = None,
    **kwargs: Any,
) -> Any:
    """Execute an async function with retry logic.

    Convenience wrapper over RetryExecutor for one-off calls.
    """
    executor = RetryExecutor(config=config, label=label)
    return await executor.run(lambda: fn(*args, **kwargs))
