# src/tracking/metrics_recorder.py - v1
"""Process-wide running counters for the orchestrator.

Counters only grow until reset() is called explicitly. The latency average
is a running mean over successful requests; failures are counted but do
not move it.
"""

from __future__ import annotations

import threading

from nutriscope.tracking.models import MetricsSnapshot


class MetricsRecorder:
    """Thread-safe request, outcome and cache counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset_unlocked()

    def _reset_unlocked(self) -> None:
        self._total = 0
        self._successes = 0
        self._failures = 0
        self._avg_latency_ms = 0.0
        self._cache_hits = 0
        self._cache_misses = 0

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hits += 1

    def record_cache_miss(self) -> None:
        with self._lock:
            self._cache_misses += 1

    def record_outcome(self, latency_ms: float, success: bool) -> None:
        """Count one completed request (cache misses only)."""
        with self._lock:
            self._total += 1
            if success:
                self._successes += 1
                self._avg_latency_ms += (latency_ms - self._avg_latency_ms) / self._successes
            else:
                self._failures += 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            lookups = self._cache_hits + self._cache_misses
            return MetricsSnapshot(
                total_requests=self._total,
                successful_requests=self._successes,
                failed_requests=self._failures,
                success_rate=self._successes / self._total if self._total else 0.0,
                average_response_time=self._avg_latency_ms,
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
                cache_hit_rate=self._cache_hits / lookups if lookups else 0.0,
            )

    def reset(self) -> None:
        with self._lock:
            self._reset_unlocked()
