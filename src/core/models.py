# src/core/models.py - v3
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Field names are snake_case in Python and camelCase on the wire, matching
the JSON the AI endpoint is asked to produce.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from nutriscope.core.errors import UnknownOperationError

MAX_TAGS = 8
DEFAULT_SOURCE_TYPE = "general"


class Operation(str, Enum):
    """Analysis operation selector."""

    ANALYZE = "analysis"
    EXTRACT_FACTS = "nutrition"
    GENERATE_TAGS = "tags"


class OperationRequest(BaseModel):
    """One unit of work for the runner. Immutable."""

    model_config = ConfigDict(frozen=True)

    operation: Operation
    content: str
    source_type: str | None = None

    @classmethod
    def create(
        cls,
        operation: Operation | str,
        content: str,
        source_type: str | None = None,
    ) -> OperationRequest:
        """Build a request with the source type normalized.

        Analysis requests default to DEFAULT_SOURCE_TYPE; the other
        operations ignore the source type entirely.
        """
        try:
            op = Operation(operation)
        except ValueError as e:
            raise UnknownOperationError(operation) from e
        if op is Operation.ANALYZE:
            source_type = source_type or DEFAULT_SOURCE_TYPE
        else:
            source_type = None
        return cls(operation=op, content=content, source_type=source_type)


# === RESULT MODELS ===


class _WireModel(BaseModel):
    """Base for results parsed from endpoint JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:  # noqa: N805
        """Endpoint nulls fall back to the field default so no field is ever None.

        Done at model level: a field-level before-validator would also wrap
        ``kind``, which the result union uses as its discriminator.
        """
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class NutritionFacts(_WireModel):
    """Nutrition block embedded in an analysis result."""

    nutrients: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AnalysisResult(_WireModel):
    """Summary and structured reading of a piece of nutrition content."""

    kind: Literal["analysis"] = "analysis"
    title: str = ""
    summary: str = ""
    key_points: list[str] = Field(default_factory=list)
    nutrition_facts: NutritionFacts = Field(default_factory=NutritionFacts)
    tags: list[str] = Field(default_factory=list)
    category: str = "general"
    target_audience: list[str] = Field(default_factory=list)
    credibility_indicators: list[str] = Field(default_factory=list)
    trust_score: int | None = None
    source_type: str | None = None


class FactsResult(_WireModel):
    """Key nutrition facts extracted from content."""

    kind: Literal["nutrition"] = "nutrition"
    nutrients: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    target_group: list[str] = Field(default_factory=list)


class TagsResult(_WireModel):
    """Up to MAX_TAGS short tags."""

    kind: Literal["tags"] = "tags"
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def cap_tags(cls, v: list[str]) -> list[str]:  # noqa: N805
        return v[:MAX_TAGS]


OperationResult = Annotated[
    Union[AnalysisResult, FactsResult, TagsResult],
    Field(discriminator="kind"),
]
