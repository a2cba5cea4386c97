from __future__ import annotations

from typing import Any, Mapping, Protocol

from ..config import CategoriserConfiguration, ConfigurationError


class ProviderError(Exception):
    """Generic failure raised by an LLM provider.

    ``detail`` carries the provider's own error payload (status code, body)
    when one is available.
    """

    def __init__(self, message: str, *, detail: Any = None) -> None:
        super().__init__(message)
        self.detail = detail


class ProviderQuotaError(ProviderError):
    """Raised when a provider reports quota or rate-limit exhaustion."""


class MissingCredentialError(ConfigurationError):
    """Raised when the selected provider has no API key configured."""


class MalformedResponseError(ProviderError):
    """Raised when an LLM response cannot be parsed as the expected envelope.

    This exception includes the raw response text to aid debugging when the
    LLM returns unexpected content.
    """

    def __init__(
        self,
        message: str,
        *,
        response_text: str | None = None,
    ) -> None:
        super().__init__(message, detail=response_text)
        self.response_text = response_text

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.response_text is not None:
            # Truncate very long responses for readability
            text = self.response_text
            if len(text) > 2000:
                text = text[:2000] + "... [truncated]"
            parts.append(f"\n--- LLM Response ---\n{text}")
        return "".join(parts)


class LLMProvider(Protocol):
    """Shared contract for LLM providers.

    Providers only shape the outbound call and pull the JSON text out of the
    reply. Prompt construction and reconciliation are shared and live
    elsewhere.
    """

    name: str
    display_name: str
    model: str

    def generate(self, instructions: str, user_content: str) -> str:
        """Send one request and return the model's raw text."""
        ...

    def describe_request(
        self, instructions: str, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Return the request as recorded for diagnostics."""
        ...

    def extract_json_text(self, text: str) -> str:
        """Return the part of ``text`` expected to hold the JSON envelope."""
        ...


class ProviderFactory(Protocol):
    def __call__(
        self,
        config: CategoriserConfiguration,
        *,
        client: Any | None = None,
    ) -> LLMProvider: ...
