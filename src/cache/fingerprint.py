# src/cache/fingerprint.py - v3
"""Cache key derivation for operation requests.

The key is a SHA-256 over the raw concatenation of the operation kind, the
input text and, for analysis requests, the source type. No normalization is
applied: inputs differing only in whitespace get different keys.
"""

from __future__ import annotations

import hashlib

from nutriscope.core.models import Operation, OperationRequest

# Separates fields so that ("ab", "c") and ("a", "bc") hash differently.
_FIELD_SEP = "\x1f"


def compute_cache_key(
    operation: Operation,
    content: str,
    source_type: str | None = None,
) -> str:
    """Stable cache key: ``<operation>_<sha256 hex>``."""
    parts = [operation.value, content]
    if operation is Operation.ANALYZE and source_type is not None:
        parts.append(source_type)
    digest = hashlib.sha256(_FIELD_SEP.join(parts).encode("utf-8")).hexdigest()
    return f"{operation.value}_{digest}"


def request_cache_key(request: OperationRequest) -> str:
    """Cache key for an OperationRequest."""
    return compute_cache_key(request.operation, request.content, request.source_type)
