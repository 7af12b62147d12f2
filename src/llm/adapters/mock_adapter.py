# src/llm/adapters/mock_adapter.py - v2
"""Deterministic offline backend implementing BaseLLMClient.

Selected when no Gemini key is configured or when mock mode is forced.
It answers instantly with fixed payloads rendered as the same raw text the
real endpoint would return, so results go through the normal parse path.
The operation is recognised from the instruction line that opens the prompt.
"""

from __future__ import annotations

import json
import re
from typing import Any

from nutriscope.llm.base_client import BaseLLMClient
from nutriscope.llm.models import LLMResponse

MOCK_LATENCY_MS = 100

_SOURCE_TYPE_RE = re.compile(r"^Source type:[ \t]*(.+?)[ \t]*$", re.MULTILINE)

MOCK_FACTS: dict[str, list[str]] = {
    "nutrients": ["Vitamin D", "Calcium", "Protein", "Omega-3"],
    "benefits": ["Improved bone health", "Stronger immunity", "Heart health"],
    "recommendations": [
        "1000mg of calcium per day is recommended",
        "Take together with regular exercise",
    ],
    "warnings": [
        "Excessive intake may cause side effects",
        "Consult a doctor before taking",
    ],
    "targetGroup": ["Adults", "Seniors", "Pregnant women", "Athletes"],
}

MOCK_TAGS: list[str] = [
    "Vitamin D", "Calcium", "Bone health", "Immunity",
    "Supplements", "Health food", "Exercise", "Wellness",
]


def mock_analysis(source_type: str) -> dict[str, Any]:
    """Fixed analysis payload for *source_type*."""
    return {
        "title": f"[Mock] {source_type} nutrition content",
        "summary": f"[Mock] Nutrition content analysis result for a {source_type} source.",
        "keyPoints": ["Key nutrition fact 1", "Key nutrition fact 2", "Key nutrition fact 3"],
        "nutritionFacts": {
            "nutrients": [],
            "benefits": [],
            "recommendations": ["Recommendation 1", "Recommendation 2"],
        },
        "tags": [],
        "category": "general",
        "targetAudience": [],
        "credibilityIndicators": [],
        "trustScore": 85,
        "sourceType": source_type,
    }


class MockAdapter(BaseLLMClient):
    """Synthesizes deterministic responses without any I/O."""

    def __init__(self, model: str = "mock", **kwargs: Any) -> None:
        self._model = model

    async def generate(self, prompt: str) -> LLMResponse:
        return LLMResponse(
            content=self._render(prompt),
            model=self._model,
            provider="mock",
            latency_ms=MOCK_LATENCY_MS,
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def is_mock(self) -> bool:
        return True

    @staticmethod
    def _render(prompt: str) -> str:
        # Only the instruction line is inspected; content may contain anything.
        lines = prompt.strip().splitlines()
        instruction = lines[0] if lines else ""
        if "related tags" in instruction:
            return ", ".join(MOCK_TAGS)
        if "nutrition facts" in instruction:
            return json.dumps(MOCK_FACTS, ensure_ascii=False)
        match = _SOURCE_TYPE_RE.search(prompt)
        source_type = match.group(1) if match else "general"
        return json.dumps(mock_analysis(source_type), ensure_ascii=False)
