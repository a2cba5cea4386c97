from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from ..diagnostics import DiagnosticsRecorder, default_recorder
from .json_utils import dump_compact_json, parse_json_response
from .provider import LLMProvider, ProviderError

logger = logging.getLogger(__name__)


class LLMService:
    """Facade that sends one JSON request through a provider and parses the reply.

    Every call overwrites the diagnostics recorder with the exact request and
    either the raw response text or the error that ended the call.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        recorder: DiagnosticsRecorder | None = None,
        repair_json: bool = False,
    ) -> None:
        self._provider = provider
        self._recorder = recorder if recorder is not None else default_recorder()
        self._repair_json = repair_json

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def generate_json(
        self,
        instructions: str,
        payload: Mapping[str, Any],
        *,
        validate: Callable[[Any, str], Any] | None = None,
    ) -> Any:
        """Send ``instructions`` plus the JSON ``payload`` and return parsed JSON.

        Args:
            instructions: System instructions for the model
            payload: Request data, serialised as the user message
            validate: Optional ``(parsed, raw_text) -> value`` check applied to
                the parsed reply; a :class:`ProviderError` it raises is recorded
                like any other failure

        Raises:
            ProviderError: If the remote call fails
            MalformedResponseError: If the reply does not hold parseable JSON
        """
        provider = self._provider
        request = provider.describe_request(instructions, payload)
        user_content = dump_compact_json(payload)

        logger.info(
            "Sending %d character request to %s (%s)",
            len(instructions) + len(user_content),
            provider.display_name,
            provider.model,
        )

        try:
            text = provider.generate(instructions, user_content)
        except ProviderError as exc:
            self._recorder.record_error(provider.display_name, request, exc)
            raise
        except Exception as exc:
            wrapped = ProviderError(
                f"{provider.display_name} API Error: {exc}", detail=repr(exc)
            )
            self._recorder.record_error(provider.display_name, request, wrapped)
            raise wrapped from exc

        self._recorder.record_response(provider.display_name, request, text)

        try:
            parsed = parse_json_response(
                provider.extract_json_text(text), repair=self._repair_json
            )
            return validate(parsed, text) if validate is not None else parsed
        except ProviderError as exc:
            self._recorder.record_error(
                provider.display_name, request, exc, response=text
            )
            raise
