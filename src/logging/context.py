# src/logging/context.py - v2
"""Contextual logging support: attach operation, request and batch ids to records.

Values live in context variables, so each asyncio task sees its own copy:
concurrent batch items never overwrite each other's context.
"""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_item_index: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "item_index", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    operation: str | None = None
    request_id: str | None = None
    batch_id: str | None = None
    item_index: int | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        operation=_operation.get(),
        request_id=_request_id.get(),
        batch_id=_batch_id.get(),
        item_index=_item_index.get(),
    )


def new_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def request_context(operation: str, request_id: str | None = None) -> Iterator[str]:
    """Set operation and request id for the duration of the block."""
    rid = request_id or new_id()
    op_token = _operation.set(operation)
    rid_token = _request_id.set(rid)
    try:
        yield rid
    finally:
        _request_id.reset(rid_token)
        _operation.reset(op_token)


@contextmanager
def batch_context(batch_id: str, item_index: int | None = None) -> Iterator[str]:
    """Set batch id (and optionally the item position) for the block."""
    batch_token = _batch_id.set(batch_id)
    index_token = _item_index.set(item_index)
    try:
        yield batch_id
    finally:
        _item_index.reset(index_token)
        _batch_id.reset(batch_token)


def clear_context() -> None:
    """Reset all context variables."""
    _operation.set(None)
    _request_id.set(None)
    _batch_id.set(None)
    _item_index.set(None)
