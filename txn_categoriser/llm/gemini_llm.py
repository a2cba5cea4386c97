from __future__ import annotations

from typing import Any, Mapping

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .json_utils import extract_json_span
from .provider import (
    MalformedResponseError,
    MissingCredentialError,
    ProviderError,
    ProviderQuotaError,
)


class GeminiLLM:
    """Wrapper around the Gemini SDK with system instructions.

    Gemini is not put into JSON mode, so the reply may carry commentary
    around the object; :meth:`extract_json_text` trims it back to the
    outermost braces.
    """

    name = "gemini"
    display_name = "Gemini"
    TEMPERATURE = 0.2

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        if not model:
            raise ValueError("A Gemini model identifier is required.")
        self.model = model

        if client is None:
            if not api_key:
                raise MissingCredentialError(
                    "Google API key not found. Set GOOGLE_API_KEY in your .env "
                    "file or environment."
                )
            self._client = genai.Client(api_key=api_key)
        else:
            self._client = client

    def describe_request(
        self, instructions: str, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.TEMPERATURE,
            "prompt": instructions,
            "data": dict(payload),
        }

    def generate(self, instructions: str, user_content: str) -> str:
        config = types.GenerateContentConfig(
            system_instruction=instructions,
            temperature=self.TEMPERATURE,
        )

        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=user_content,
                config=config,
            )
        except genai_errors.APIError as exc:
            detail = {
                "code": getattr(exc, "code", None),
                "status": getattr(exc, "status", None),
                "message": getattr(exc, "message", None),
            }
            if getattr(exc, "code", None) == 429:
                raise ProviderQuotaError(
                    "Gemini API Error: quota exhausted or rate limited", detail=detail
                ) from exc
            raise ProviderError(f"Gemini API Error: {exc}", detail=detail) from exc
        except Exception as exc:
            raise ProviderError(f"Gemini API Error: {exc}", detail=repr(exc)) from exc

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            raise MalformedResponseError(
                "Response object does not expose any text.",
                response_text=str(response),
            )
        return text

    def extract_json_text(self, text: str) -> str:
        try:
            return extract_json_span(text)
        except ValueError as exc:
            raise MalformedResponseError(str(exc), response_text=text) from exc
