# src/llm/client_factory.py - v3
"""Factory: instantiate the LLM backend from settings.

Called once by the orchestrator. Absence of a credential, a credential that
is obviously malformed, or an explicit mock flag selects the MockAdapter for
the orchestrator's lifetime instead of failing construction.
"""

from __future__ import annotations

import logging
import re

from nutriscope.config.settings import Settings
from nutriscope.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "nutriscope.llm.adapters.google_adapter.GoogleAdapter",
    "mock": "nutriscope.llm.adapters.mock_adapter.MockAdapter",
}

# Printable, no whitespace. Anything else cannot be sent as a header.
_KEY_RE = re.compile(r"^[\x21-\x7e]{8,}$")


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def is_valid_api_key(api_key: str) -> bool:
    """Cheap local plausibility check on a credential string."""
    return bool(api_key) and _KEY_RE.match(api_key) is not None


def create_llm_client(
    settings: Settings,
    force_mock: bool = False,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the backend selected by *settings*.

    Args:
        settings: Application settings (provider, model, API key).
        force_mock: Select the mock backend regardless of credentials.
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    provider = settings.llm_provider
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    if force_mock or settings.mock_mode or provider == "mock":
        logger.info("Mock mode forced; LLM calls are simulated")
        provider = "mock"
    elif not settings.has_credentials:
        logger.warning("GEMINI_API_KEY is not set; running in mock mode")
        provider = "mock"
    elif not is_valid_api_key(settings.gemini_api_key):
        logger.warning("GEMINI_API_KEY looks malformed; running in mock mode")
        provider = "mock"

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = settings.llm_model
    if provider == "google":
        init_kwargs.setdefault("api_key", settings.gemini_api_key)
        init_kwargs.setdefault("temperature", settings.llm_temperature)
        init_kwargs.setdefault("top_k", settings.llm_top_k)
        init_kwargs.setdefault("top_p", settings.llm_top_p)
        init_kwargs.setdefault("max_output_tokens", settings.llm_max_output_tokens)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, settings.llm_model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, class_name)
