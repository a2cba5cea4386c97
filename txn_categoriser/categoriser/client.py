from __future__ import annotations

from typing import Any, Sequence

from ..llm.json_utils import parse_suggestion_envelope
from ..llm.service import LLMService
from ..models import ReferenceTransaction, UncategorisedTransaction
from .prompt_factory import build_instructions, compose_request


class CategorisationClient:
    """Ask the configured provider for category suggestions.

    The request and instructions are composed here once, whichever provider
    sits behind the service.
    """

    def __init__(self, service: LLMService) -> None:
        self._service = service

    @property
    def provider_name(self) -> str:
        return self._service.provider.display_name

    def categorise(
        self,
        transactions: Sequence[UncategorisedTransaction],
        categories: Sequence[str],
        references: Sequence[ReferenceTransaction],
    ) -> list[Any]:
        """Return the raw ``suggested_transactions`` entries for ``transactions``.

        Entries are not validated individually; see
        :func:`~txn_categoriser.categoriser.reconciler.reconcile`.

        Raises:
            ProviderError: If the call fails
            MalformedResponseError: If the reply has no suggestion array
        """
        request = compose_request(transactions, references)
        instructions = build_instructions(categories)
        return self._service.generate_json(
            instructions,
            request.to_payload(),
            validate=lambda data, text: parse_suggestion_envelope(
                data, response_text=text
            ),
        )
