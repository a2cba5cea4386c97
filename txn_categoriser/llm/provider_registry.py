from __future__ import annotations

from typing import Any

from ..config import CategoriserConfiguration, ConfigurationError
from ..models.enums import ProviderName
from .gemini_llm import GeminiLLM
from .openai_llm import OpenAILLM
from .provider import LLMProvider, ProviderFactory


def _openai_factory(
    config: CategoriserConfiguration,
    *,
    client: Any | None = None,
) -> LLMProvider:
    return OpenAILLM(
        config.model_for(ProviderName.OPENAI.value),
        api_key=config.api_key_for(ProviderName.OPENAI.value),
        client=client,
    )


def _gemini_factory(
    config: CategoriserConfiguration,
    *,
    client: Any | None = None,
) -> LLMProvider:
    return GeminiLLM(
        config.model_for(ProviderName.GEMINI.value),
        api_key=config.api_key_for(ProviderName.GEMINI.value),
        client=client,
    )


_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    ProviderName.OPENAI.value: _openai_factory,
    ProviderName.GEMINI.value: _gemini_factory,
}


def create_provider(
    config: CategoriserConfiguration,
    *,
    client: Any | None = None,
) -> LLMProvider:
    """Return a fresh provider handle for the configured provider.

    Handles are never cached between runs; a configuration change simply
    produces a different handle on the next call.
    """
    name = (config.provider or "").strip().lower()
    if name not in _PROVIDER_FACTORIES:
        raise ConfigurationError(f"Unknown LLM provider '{config.provider}'")
    return _PROVIDER_FACTORIES[name](config, client=client)
