# src/tracking/call_logger.py - v2
"""Endpoint call logging: one record per attempt.

Keeps the most recent ``max_records`` attempts in memory for inspection
and can export them as JSON Lines for post-run analysis.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from pathlib import Path

from nutriscope.llm.models import LLMResponse
from nutriscope.tracking.models import LLMCallRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 10_000


class CallLogger:
    """Accumulates call records for the orchestrator's lifetime."""

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        self._records: deque[LLMCallRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def record(
        self,
        operation: str,
        provider: str,
        model: str,
        attempt: int,
        latency_ms: int,
        status: str = "success",
        response: LLMResponse | None = None,
        error: BaseException | None = None,
    ) -> LLMCallRecord:
        """Record one endpoint attempt.

        Args:
            operation: Operation name (analysis, nutrition, tags).
            provider: Backend provider name.
            model: Backend model name.
            attempt: 1-based attempt number within the retry sequence.
            latency_ms: Wall-clock duration of the attempt.
            status: success, retry (failed, will be retried) or failed.
            response: Endpoint response, for token usage.
            error: Exception raised by the attempt, if any.

        Returns:
            The recorded LLMCallRecord.
        """
        record = LLMCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            operation=operation,
            provider=provider,
            model=model,
            attempt=attempt,
            input_tokens=response.input_tokens if response else 0,
            output_tokens=response.output_tokens if response else 0,
            latency_ms=latency_ms,
            status=status,
            error=f"{type(error).__name__}: {error}" if error is not None else None,
        )
        with self._lock:
            self._records.append(record)
        return record

    @property
    def records(self) -> list[LLMCallRecord]:
        """Recorded attempts, oldest first."""
        with self._lock:
            return list(self._records)

    @property
    def total_calls(self) -> int:
        """Number of retained attempts."""
        return len(self._records)

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed across retained attempts."""
        return sum(r.input_tokens + r.output_tokens for r in self.records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def save(self, path: Path) -> None:
        """Save all records to a JSON Lines file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for record in self.records:
                f.write(json.dumps(record.model_dump(), default=str) + "\n")
        logger.info("Saved %d call records to %s", self.total_calls, path)
