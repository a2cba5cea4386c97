from __future__ import annotations

from typing import Any, Mapping

import openai
from openai import OpenAI

from .provider import (
    MalformedResponseError,
    MissingCredentialError,
    ProviderError,
    ProviderQuotaError,
)


class OpenAILLM:
    """Wrapper around the OpenAI chat completions API.

    Requests a JSON-typed response and returns ``choices[0].message.content``.
    Sampling is pinned (low temperature, fixed seed) so repeated runs over the
    same rows are as repeatable as the API allows.
    """

    name = "openai"
    display_name = "OpenAI"
    TEMPERATURE = 0.2
    TOP_P = 0.1
    SEED = 1

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        client: OpenAI | None = None,
    ) -> None:
        if not model:
            raise ValueError("An OpenAI model identifier is required.")
        self.model = model

        if client is None:
            if not api_key:
                raise MissingCredentialError(
                    "OpenAI API key not found. Set OPENAI_API_KEY in your .env "
                    "file or environment."
                )
            self._client = OpenAI(api_key=api_key)
        else:
            self._client = client

    def _sampling_args(self) -> dict[str, Any]:
        return {
            "temperature": self.TEMPERATURE,
            "top_p": self.TOP_P,
            "seed": self.SEED,
        }

    def describe_request(
        self, instructions: str, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        return {
            "model": self.model,
            **self._sampling_args(),
            "response_format": {"type": "json_object"},
            "prompt": instructions,
            "data": dict(payload),
        }

    def generate(self, instructions: str, user_content: str) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": user_content},
                ],
                **self._sampling_args(),
            )
        except openai.RateLimitError as exc:
            raise ProviderQuotaError(
                f"OpenAI API Error: rate limited or quota exhausted: {exc}",
                detail=getattr(exc, "body", None) or str(exc),
            ) from exc
        except openai.APIError as exc:
            raise ProviderError(
                f"OpenAI API Error: {exc}",
                detail=getattr(exc, "body", None) or str(exc),
            ) from exc
        except Exception as exc:
            raise ProviderError(f"OpenAI API Error: {exc}", detail=repr(exc)) from exc

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise MalformedResponseError(
                "OpenAI response has no message content", response_text=str(completion)
            ) from exc
        if not content:
            raise MalformedResponseError("No response from OpenAI API", response_text="")
        return content

    def extract_json_text(self, text: str) -> str:
        # JSON mode guarantees the whole message is the object.
        return text.strip()
