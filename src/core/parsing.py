# src/core/parsing.py - v2
"""Best-effort parsing of raw endpoint text into result models.

The endpoint is asked for JSON but may wrap it in prose or markdown fences.
The policy is implemented once here: take the first balanced ``{...}`` span,
validate it against the target model, and on any failure substitute a
well-formed fallback. Parsing never raises.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, TypeVar

from pydantic import BaseModel, ValidationError

from nutriscope.core.errors import UnknownOperationError
from nutriscope.core.models import (
    MAX_TAGS,
    AnalysisResult,
    FactsResult,
    Operation,
    TagsResult,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

FALLBACK_SUMMARY_CHARS = 200


def extract_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span of *text*, or None.

    Braces inside JSON string literals are ignored. A ``{`` that never
    closes is skipped and the scan restarts at the next one.
    """
    start = text.find("{")
    while start != -1:
        span = _balanced_span(text, start)
        if span is not None:
            return span
        start = text.find("{", start + 1)
    return None


def _balanced_span(text: str, start: int) -> str | None:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_structured_response(
    raw_text: str,
    model_cls: type[M],
    fallback: Callable[[str], M],
) -> M:
    """Parse *raw_text* into *model_cls*, or build ``fallback(raw_text)``.

    Args:
        raw_text: Raw endpoint output.
        model_cls: Target pydantic model.
        fallback: Factory receiving the raw text, used on any failure.

    Returns:
        A validated model instance; never raises on malformed input.
    """
    span = extract_json_object(raw_text)
    if span is None:
        logger.warning(
            "No JSON object in %s response (%d chars); using fallback",
            model_cls.__name__, len(raw_text),
        )
        return fallback(raw_text)

    try:
        data = json.loads(span)
        if not isinstance(data, dict):
            raise TypeError(f"expected object, got {type(data).__name__}")
        return model_cls.model_validate(data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning("%s response parse failed: %s", model_cls.__name__, e)
        return fallback(raw_text)


def fallback_analysis(raw_text: str) -> AnalysisResult:
    """Empty-but-valid analysis echoing the start of the raw text."""
    return AnalysisResult(
        title="Analysis result",
        summary=raw_text[:FALLBACK_SUMMARY_CHARS] + "...",
    )


def fallback_facts(raw_text: str) -> FactsResult:
    return FactsResult()


def parse_tags(raw_text: str) -> TagsResult:
    """Comma-separated tags: trimmed, empties dropped, capped at MAX_TAGS."""
    tags = [t.strip() for t in raw_text.strip().split(",")]
    return TagsResult(tags=[t for t in tags if t][:MAX_TAGS])


def parse_operation_response(
    operation: Operation, raw_text: str
) -> AnalysisResult | FactsResult | TagsResult:
    """Dispatch raw endpoint text to the parser for *operation*."""
    if operation is Operation.ANALYZE:
        return parse_structured_response(raw_text, AnalysisResult, fallback_analysis)
    if operation is Operation.EXTRACT_FACTS:
        return parse_structured_response(raw_text, FactsResult, fallback_facts)
    if operation is Operation.GENERATE_TAGS:
        return parse_tags(raw_text)
    raise UnknownOperationError(operation)
