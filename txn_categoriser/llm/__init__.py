"""LLM provider wrappers and the shared request service."""

from __future__ import annotations

from .provider import (
    LLMProvider,
    MalformedResponseError,
    MissingCredentialError,
    ProviderError,
    ProviderQuotaError,
)
from .provider_registry import create_provider
from .service import LLMService

__all__ = [
    "LLMProvider",
    "LLMService",
    "MalformedResponseError",
    "MissingCredentialError",
    "ProviderError",
    "ProviderQuotaError",
    "create_provider",
]
