# src/llm/models.py - v2
"""LLM-specific types: LLMResponse.

Every backend, real or mock, returns this normalized shape from generate().
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class LLMResponse(BaseModel):
    """Normalized response from any LLM backend."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str
    provider: str
    latency_ms: int
    raw_response: Any = None
