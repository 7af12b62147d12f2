# src/llm/adapters/google_adapter.py - v2
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-generativeai SDK. The SDK is imported lazily so that the
mock backend works in environments where it is not installed.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from nutriscope.llm.base_client import BaseLLMClient
from nutriscope.llm.models import LLMResponse

logger = logging.getLogger(__name__)


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(
        self,
        model: str = "gemini-2.5-flash",
        api_key: str = "",
        temperature: float = 0.7,
        top_k: int = 40,
        top_p: float = 0.95,
        max_output_tokens: int = 2048,
        **kwargs: Any,
    ):
        self._model = model
        self._api_key = api_key
        self._generation_config: dict[str, Any] = {
            "temperature": temperature,
            "top_k": top_k,
            "top_p": top_p,
            "max_output_tokens": max_output_tokens,
        }
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init GenerativeModel (only on first API call)."""
        if self.__client is None:
            try:
                import google.generativeai as genai
            except ImportError as e:
                raise ImportError(
                    "google-generativeai package required: pip install google-generativeai"
                ) from e
            genai.configure(api_key=self._api_key)
            self.__client = genai.GenerativeModel(
                self._model,
                generation_config=self._generation_config,
            )
            logger.debug("Gemini model initialised: %s", self._model)
        return self.__client

    async def generate(self, prompt: str) -> LLMResponse:
        """Text completion via generate_content_async."""
        t0 = time.monotonic()
        resp = await self._client.generate_content_async(prompt)
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=resp.text or "",
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model
