# tests/unit/llm/test_unit_retry.py - v2
"""Tests for llm/retry.py: backoff schedule, exhaustion, error classification."""

from __future__ import annotations

import asyncio

import pytest

from nutriscope.llm.retry import RetryConfig, RetryExecutor, classify_error, with_retry


def _flaky(failures: int, error: Exception | None = None):
    """Action failing *failures* times before returning "ok"."""
    state = {"calls": 0}

    async def action():
        state["calls"] += 1
        if state["calls"] <= failures:
            raise error or ConnectionError(f"failure {state['calls']}")
        return "ok"

    return action, state


class TestRetryConfig:
    def test_defaults(self):
        cfg = RetryConfig()
        assert cfg.attempts == 3
        assert cfg.base_delay_s == 2.0

    def test_exponential_delays(self):
        cfg = RetryConfig(base_delay_s=2.0)
        assert [cfg.delay_for(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]


class TestRetryExecutor:
    @pytest.mark.asyncio
    async def test_first_attempt_success(self, fake_clock):
        action, state = _flaky(0)
        executor = RetryExecutor(RetryConfig(base_delay_s=0.1), sleep=fake_clock.sleep)
        assert await executor.run(action) == "ok"
        assert state["calls"] == 1
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_recovers_with_backoff(self, fake_clock):
        action, state = _flaky(2)
        executor = RetryExecutor(RetryConfig(attempts=3, base_delay_s=0.1), sleep=fake_clock.sleep)
        assert await executor.run(action) == "ok"
        assert state["calls"] == 3
        assert fake_clock.sleeps == [pytest.approx(0.1), pytest.approx(0.2)]

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error_unchanged(self, fake_clock):
        errors = [TimeoutError("t1"), ValueError("v2"), PermissionError("p3")]

        async def action():
            raise errors.pop(0)

        executor = RetryExecutor(RetryConfig(attempts=3, base_delay_s=0.1), sleep=fake_clock.sleep)
        with pytest.raises(PermissionError, match="p3"):
            await executor.run(action)
        # No backoff after the final attempt.
        assert len(fake_clock.sleeps) == 2

    @pytest.mark.asyncio
    async def test_auth_errors_are_retried_too(self, fake_clock):
        action, state = _flaky(5, PermissionError("403 API key invalid"))
        executor = RetryExecutor(RetryConfig(attempts=3, base_delay_s=0.0), sleep=fake_clock.sleep)
        with pytest.raises(PermissionError):
            await executor.run(action)
        assert state["calls"] == 3

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self, fake_clock):
        action, state = _flaky(1)
        executor = RetryExecutor(RetryConfig(attempts=1), sleep=fake_clock.sleep)
        with pytest.raises(ConnectionError):
            await executor.run(action)
        assert state["calls"] == 1
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_on_failure_hook(self, fake_clock):
        action, _ = _flaky(2)
        seen: list[tuple[int, str]] = []
        executor = RetryExecutor(RetryConfig(base_delay_s=0.0), sleep=fake_clock.sleep)
        await executor.run(action, on_failure=lambda n, e: seen.append((n, str(e))))
        assert seen == [(1, "failure 1"), (2, "failure 2")]

    @pytest.mark.asyncio
    async def test_logs_warning_then_error(self, fake_clock, caplog):
        action, _ = _flaky(3)
        executor = RetryExecutor(RetryConfig(attempts=2, base_delay_s=0.0), label="tags", sleep=fake_clock.sleep)
        with caplog.at_level("WARNING"), pytest.raises(ConnectionError):
            await executor.run(action)
        levels = [r.levelname for r in caplog.records if r.name == "nutriscope.llm.retry"]
        assert levels == ["WARNING", "ERROR"]
        assert "'tags'" in caplog.text

    @pytest.mark.asyncio
    async def test_with_retry_helper(self):
        action, state = _flaky(1)
        result = await with_retry(action, config=RetryConfig(attempts=2, base_delay_s=0.0))
        assert result == "ok"
        assert state["calls"] == 2


class TestClassifyError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (asyncio.TimeoutError(), "timeout"),
            (RuntimeError("429 Resource has been exhausted (quota)"), "rate_limit"),
            (PermissionError("403 API key not valid"), "auth"),
            (RuntimeError("503 Service Unavailable"), "server_error"),
            (ValueError("could not decode response"), "parse_error"),
            (RuntimeError("something odd"), "unknown"),
        ],
    )
    def test_classification(self, error, expected):
        assert classify_error(error) == expected
