"""Record of the most recent LLM request/response for operator inspection.

Only the latest interaction is kept. It is overwritten by every provider
call, successful or not, and is never persisted.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class ApiInteractionRecord:
    """One provider call as seen from this side of the wire."""

    timestamp: str
    provider: str
    request: dict[str, Any]
    response: str | None = None
    error: dict[str, Any] | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "provider": self.provider,
            "request": self.request,
            "response": self.response,
            "error": self.error,
        }


@dataclass
class DiagnosticsRecorder:
    """Holds the latest :class:`ApiInteractionRecord`. Last writer wins."""

    _latest: ApiInteractionRecord | None = field(default=None, repr=False)

    def latest(self) -> ApiInteractionRecord | None:
        return self._latest

    def clear(self) -> None:
        self._latest = None

    def record_response(
        self, provider: str, request: dict[str, Any], response: str
    ) -> ApiInteractionRecord:
        record = ApiInteractionRecord(
            timestamp=_now_iso(),
            provider=provider,
            request=request,
            response=response,
        )
        self._latest = record
        return record

    def record_error(
        self,
        provider: str,
        request: dict[str, Any],
        error: BaseException,
        *,
        response: str | None = None,
    ) -> ApiInteractionRecord:
        record = ApiInteractionRecord(
            timestamp=_now_iso(),
            provider=provider,
            request=request,
            response=response,
            error=describe_error(error),
        )
        self._latest = record
        return record


def describe_error(error: BaseException) -> dict[str, Any]:
    """Summarise an exception for display: type, message, detail and trace."""
    described: dict[str, Any] = {
        "type": type(error).__name__,
        "message": str(error),
        "stack": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ),
    }
    detail = getattr(error, "detail", None)
    if detail is not None:
        described["detail"] = detail
    return described


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


_DEFAULT_RECORDER = DiagnosticsRecorder()


def default_recorder() -> DiagnosticsRecorder:
    """Process-wide recorder used when a run is not given its own."""
    return _DEFAULT_RECORDER


def get_last_api_interaction() -> ApiInteractionRecord | None:
    """Return the latest interaction recorded process-wide, or ``None``."""
    return _DEFAULT_RECORDER.latest()
