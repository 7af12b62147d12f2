# tests/unit/tracking/test_unit_call_logger.py - v2
"""Tests for tracking/call_logger.py."""

from __future__ import annotations

import json

from nutriscope.llm.models import LLMResponse
from nutriscope.tracking.call_logger import CallLogger


def _response() -> LLMResponse:
    return LLMResponse(
        content="ok", input_tokens=100, output_tokens=50,
        model="gemini-2.5-flash", provider="google", latency_ms=500,
    )


class TestCallLogger:
    def test_record_success(self):
        logger = CallLogger()
        record = logger.record(
            operation="analysis", provider="google", model="gemini-2.5-flash",
            attempt=1, latency_ms=500, response=_response(),
        )
        assert record.status == "success"
        assert record.input_tokens == 100
        assert record.error is None
        assert logger.total_calls == 1
        assert logger.total_tokens == 150

    def test_record_failure(self):
        logger = CallLogger()
        record = logger.record(
            operation="tags", provider="google", model="m", attempt=2,
            latency_ms=30, status="retry", error=TimeoutError("slow"),
        )
        assert record.status == "retry"
        assert record.error == "TimeoutError: slow"
        assert record.input_tokens == 0

    def test_bounded_history(self):
        logger = CallLogger(max_records=3)
        for attempt in range(1, 6):
            logger.record(operation="tags", provider="p", model="m", attempt=attempt, latency_ms=1)
        assert [r.attempt for r in logger.records] == [3, 4, 5]

    def test_clear(self):
        logger = CallLogger()
        logger.record(operation="tags", provider="p", model="m", attempt=1, latency_ms=1)
        logger.clear()
        assert logger.total_calls == 0

    def test_save_jsonl(self, tmp_path):
        logger = CallLogger()
        logger.record(operation="analysis", provider="p", model="m", attempt=1, latency_ms=1)
        logger.record(operation="nutrition", provider="p", model="m", attempt=1, latency_ms=2)
        path = tmp_path / "calls" / "log.jsonl"
        logger.save(path)

        lines = path.read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["operation"] for line in lines] == ["analysis", "nutrition"]
