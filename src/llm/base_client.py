# src/llm/base_client.py - v2
"""Abstract LLM client interface.

The orchestrator talks to exactly one backend through this contract; the
choice between the real Gemini endpoint and the deterministic mock is made
once, at construction time (see client_factory).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from nutriscope.llm.models import LLMResponse


class BaseLLMClient(ABC):
    """Unified interface for all text-generation backends."""

    @abstractmethod
    async def generate(self, prompt: str) -> LLMResponse:
        """Single text completion for *prompt*. One network call at most."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, mock)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier used for call records."""

    @property
    def is_mock(self) -> bool:
        """Whether results are synthesized locally instead of generated."""
        return False
