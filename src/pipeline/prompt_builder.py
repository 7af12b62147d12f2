# src/pipeline/prompt_builder.py - v1
"""Operation-specific prompt construction from text templates.

Templates live in pipeline/prompts/<operation>.txt and are loaded once.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from nutriscope.core.errors import UnknownOperationError
from nutriscope.core.models import DEFAULT_SOURCE_TYPE, Operation, OperationRequest

_PROMPT_DIR = Path(__file__).parent / "prompts"


SOURCE_TYPE_DESCRIPTIONS: dict[str, str] = {
    "paper": "academic paper",
    "youtube": "YouTube video",
    "news": "news article",
    "general": "general",
}


def describe_source_type(source_type: str | None) -> str:
    """Human description of a source type; unknown types read as general."""
    return SOURCE_TYPE_DESCRIPTIONS.get(
        source_type or DEFAULT_SOURCE_TYPE, SOURCE_TYPE_DESCRIPTIONS[DEFAULT_SOURCE_TYPE]
    )


@lru_cache(maxsize=None)
def load_template(operation: Operation) -> str:
    """Load and cache the prompt template for *operation*."""
    path = _PROMPT_DIR / f"{operation.value}.txt"
    if not path.exists():
        raise UnknownOperationError(operation)
    return path.read_text(encoding="utf-8")


def build_prompt(request: OperationRequest) -> str:
    """Fill the template for the request's operation."""
    template = load_template(request.operation)
    source_type = request.source_type or DEFAULT_SOURCE_TYPE
    return template.format(
        content=request.content,
        source_type=source_type,
        source_description=describe_source_type(source_type),
    )
