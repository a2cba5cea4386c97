"""Shared JSON extraction utilities for LLM responses.

Models are asked to reply with a bare JSON object but occasionally wrap it
in commentary or code fences. This module isolates the tolerant parsing of
that text so the rest of the pipeline only ever sees a parsed envelope.
"""

from __future__ import annotations

import json
from typing import Any

from json_repair import repair_json

from .provider import MalformedResponseError

SUGGESTIONS_KEY = "suggested_transactions"


def dump_compact_json(payload: Any) -> str:
    """Serialise a request payload as the user message sent to a model.

    Compact separators keep large reference corpora under context limits;
    non-ASCII merchant names are kept verbatim.
    """
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def extract_json_span(text: str) -> str:
    """Return the outermost ``{...}`` span of ``text``.

    The span runs from the first ``{`` to the last ``}``, so surrounding
    commentary is dropped while nested objects stay intact.

    Raises:
        ValueError: If the text has no object delimiters

    Example:
        >>> extract_json_span('Sure! {"a": {"b": 1}} Hope that helps.')
        '{"a": {"b": 1}}'
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("Response text does not contain a JSON object.")
    return text[start : end + 1]


def parse_json_response(text: str, *, repair: bool = False) -> Any:
    """Parse JSON text, optionally repairing common formatting faults first.

    Args:
        text: The JSON text to parse
        repair: Run ``json_repair`` over the text before parsing (trailing
            commas, single quotes, unterminated structures)

    Raises:
        MalformedResponseError: If the text still does not parse
    """
    candidate = repair_json(text) if repair else text
    try:
        return json.loads(candidate)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedResponseError(
            f"Response is not valid JSON: {exc}", response_text=text
        ) from exc


def parse_suggestion_envelope(data: Any, *, response_text: str | None = None) -> list[Any]:
    """Return the ``suggested_transactions`` array of a parsed response.

    Individual entries are returned untouched; they are validated one by one
    during reconciliation.

    Raises:
        MalformedResponseError: If ``data`` is not an object or lacks the array
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(
            "Expected a top-level JSON object", response_text=response_text
        )
    suggestions = data.get(SUGGESTIONS_KEY)
    if not isinstance(suggestions, list):
        raise MalformedResponseError(
            f"Response is missing a '{SUGGESTIONS_KEY}' array",
            response_text=response_text,
        )
    return suggestions
