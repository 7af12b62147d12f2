# src/batch/models.py - v2
"""Batch processing models: BatchItem, BatchResult."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from nutriscope.core.models import Operation, OperationResult


class BatchItem(BaseModel):
    """A single input of a batch.

    ``operation`` overrides the batch-wide operation for this item only.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    source_type: str | None = None
    operation: Operation | None = None


class BatchResult(BaseModel):
    """Outcome of one batch item, positionally aligned with the input."""

    index: int
    success: bool
    result: OperationResult | None = None
    error_message: str | None = None
    original_input: BatchItem
