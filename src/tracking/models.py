# src/tracking/models.py - v2
"""Tracking domain models: LLMCallRecord, MetricsSnapshot, PerformanceStats."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class LLMCallRecord(BaseModel):
    """Individual endpoint call attempt."""

    call_id: str
    timestamp: datetime
    operation: str
    provider: str
    model: str
    attempt: int
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int
    status: Literal["success", "retry", "failed"]
    error: str | None = None


class MetricsSnapshot(BaseModel):
    """Point-in-time copy of the orchestrator counters.

    Rates are fractions in [0, 1]; average_response_time is in milliseconds
    and covers successful requests only.
    """

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    success_rate: float = 0.0
    average_response_time: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0
    cache_hit_rate: float = 0.0


class PerformanceStats(BaseModel):
    """Human-facing report: counters plus live gate and cache state."""

    total_requests: int
    successful_requests: int
    failed_requests: int
    success_rate: str
    average_response_time: int
    cache_hit_rate: str
    cache_hits: int
    cache_misses: int
    active_requests: int
    queue_length: int
    cache_size: int

    @classmethod
    def build(
        cls,
        snapshot: MetricsSnapshot,
        active_requests: int,
        queue_length: int,
        cache_size: int,
    ) -> PerformanceStats:
        return cls(
            total_requests=snapshot.total_requests,
            successful_requests=snapshot.successful_requests,
            failed_requests=snapshot.failed_requests,
            success_rate=f"{snapshot.success_rate * 100:.2f}%",
            average_response_time=round(snapshot.average_response_time),
            cache_hit_rate=f"{snapshot.cache_hit_rate * 100:.2f}%",
            cache_hits=snapshot.cache_hits,
            cache_misses=snapshot.cache_misses,
            active_requests=active_requests,
            queue_length=queue_length,
            cache_size=cache_size,
        )
