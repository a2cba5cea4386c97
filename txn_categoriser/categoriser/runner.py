"""Orchestrate one categorisation run against a record source.

The runner reads the pending batch, the reference corpus and the category
registry, asks the provider for suggestions, reconciles them and writes the
result back. Every failure is caught here and reported through
:class:`~txn_categoriser.models.RunResult`; nothing escapes to the caller.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..config import CategoriserConfiguration
from ..diagnostics import DiagnosticsRecorder
from ..llm.provider import LLMProvider
from ..llm.provider_registry import create_provider
from ..llm.service import LLMService
from ..models import CategorisationRequest, ReferenceTransaction, RunResult
from ..sources.base import ColumnMap, RecordSource, resolve_columns
from .batcher import PendingBatch, select_pending
from .client import CategorisationClient
from .prompt_factory import build_instructions, compose_request
from .reconciler import reconcile
from .references import build_reference_corpus
from .registry import load_category_registry
from .write_back import apply_updates

logger = logging.getLogger(__name__)

NO_WORK_MESSAGE = "No uncategorized transactions found"
NO_UPDATES_MESSAGE = "No transactions needed updating"


@dataclass
class PreparedRun:
    """Everything read from the source before the provider is called."""

    columns: ColumnMap
    batch: PendingBatch
    references: list[ReferenceTransaction]
    categories: list[str]

    @property
    def request(self) -> CategorisationRequest:
        return compose_request(self.batch.transactions, self.references)


class CategoriserRunner:
    """Runs the categorisation pipeline for one record source."""

    def __init__(
        self,
        source: RecordSource,
        config: CategoriserConfiguration,
        *,
        provider_factory: Callable[[CategoriserConfiguration], LLMProvider] = create_provider,
        recorder: DiagnosticsRecorder | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source
        self.config = config
        self._provider_factory = provider_factory
        self._recorder = recorder
        self._clock = clock

    def prepare(self) -> PreparedRun | None:
        """Read the batch, references and registry. ``None`` means no work.

        Raises:
            ConfigurationError: If the configuration or the table layout is invalid
        """
        self.config.validate()
        columns = resolve_columns(self.source.headers())

        batch = select_pending(
            self.source.visible_rows(), columns, self.config.max_batch_size
        )
        if not batch:
            return None

        references = build_reference_corpus(
            self.source.all_rows(),
            columns,
            self.config.max_reference_transactions,
            order=self.config.reference_order,
        )
        categories = load_category_registry(self.source.category_values())

        logger.info(
            "Prepared %d pending transaction(s), %d reference transaction(s), "
            "%d categories",
            len(batch),
            len(references),
            len(categories),
        )
        return PreparedRun(
            columns=columns, batch=batch, references=references, categories=categories
        )

    def compose_request(self) -> tuple[CategorisationRequest, str] | None:
        """Return the request and instructions a run would send, without sending."""
        prepared = self.prepare()
        if prepared is None:
            return None
        return prepared.request, build_instructions(prepared.categories)

    def run(self, *, dry_run: bool = False) -> RunResult:
        """Run the workflow.

        Args:
            dry_run: If True, read and compose the request but do not call the LLM

        Returns:
            A :class:`RunResult`; ``success`` is False only when the run failed.
        """
        try:
            prepared = self.prepare()
            if prepared is None:
                logger.info(NO_WORK_MESSAGE)
                return RunResult(success=True, message=NO_WORK_MESSAGE)

            if dry_run:
                return RunResult(
                    success=True,
                    message=(
                        f"Dry run: {len(prepared.batch)} pending transaction(s), "
                        f"{len(prepared.references)} reference transaction(s), "
                        f"{len(prepared.categories)} categories"
                    ),
                )

            provider = self._provider_factory(self.config)
            service = LLMService(
                provider, recorder=self._recorder, repair_json=self.config.repair_json
            )
            suggestions = CategorisationClient(service).categorise(
                prepared.batch.transactions,
                prepared.categories,
                prepared.references,
            )
            logger.info("Received %d suggestion(s)", len(suggestions))

            decisions = reconcile(
                suggestions,
                prepared.batch.identity_index,
                prepared.categories,
                update_descriptions=self.config.update_descriptions,
                now=self._clock(),
            )
            updated = apply_updates(self.source, decisions, prepared.columns)
        except Exception as exc:
            logger.exception("Categorisation run failed")
            return _failure(exc)

        if updated:
            logger.info("Updated %d transaction(s)", updated)
            return RunResult(
                success=True,
                message=f"Updated {updated} transactions",
                updated_count=updated,
            )
        return RunResult(success=True, message=NO_UPDATES_MESSAGE)


def _failure(exc: Exception) -> RunResult:
    # args[0] is the short message; str(exc) may carry the raw response.
    message = str(exc.args[0]) if exc.args else type(exc).__name__
    details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return RunResult(
        success=False,
        message=message or "Unknown error occurred",
        error_type=type(exc).__name__,
        error_details=f"{exc}\n\n{details}",
    )
