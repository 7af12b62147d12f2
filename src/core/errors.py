# src/core/errors.py - v1
"""Exception hierarchy for the analysis orchestrator.

Network failures are not wrapped: once retries are exhausted the last
endpoint error reaches the caller unchanged.
"""

from __future__ import annotations


class NutriscopeError(Exception):
    """Base class for errors raised by this package."""


class UnknownOperationError(NutriscopeError, ValueError):
    """Raised when an operation selector is not recognised."""

    def __init__(self, operation: object) -> None:
        self.operation = operation
        super().__init__(f"Unknown operation: {operation!r}")
