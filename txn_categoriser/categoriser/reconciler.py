"""Reconcile untrusted model suggestions against the pending batch.

Each suggestion is checked on its own. A bad entry is logged and skipped;
it never aborts the run. Only suggestions whose ``transaction_id`` belongs
to the pending batch produce a decision, and a category outside the
registry is replaced by the fallback label.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from ..models import FALLBACK_CATEGORY, RowUpdateDecision, SuggestedTransaction

logger = logging.getLogger(__name__)


def resolve_category(category: str | None, allowed: set[str]) -> str:
    if category is not None and category in allowed:
        return category
    return FALLBACK_CATEGORY


def reconcile(
    suggestions: Sequence[Any],
    identity_index: Mapping[str, int],
    categories: Sequence[str],
    *,
    update_descriptions: bool,
    now: datetime,
) -> list[RowUpdateDecision]:
    """Turn raw suggestions into row update decisions.

    Args:
        suggestions: Raw entries of the ``suggested_transactions`` array
        identity_index: transaction_id -> row position for the pending batch
        categories: The category registry
        update_descriptions: Whether cleaned descriptions are written back
        now: Timestamp stamped on every decision

    Returns:
        At most one decision per pending row, in suggestion order.
    """
    allowed = set(categories)
    decisions: list[RowUpdateDecision] = []
    seen: set[str] = set()

    for position, raw in enumerate(suggestions):
        try:
            suggestion = SuggestedTransaction.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Skipping suggestion %d: invalid shape (%s)",
                position,
                exc.errors()[0].get("msg") if exc.errors() else exc,
            )
            continue

        tid = suggestion.transaction_id
        if tid not in identity_index:
            logger.warning(
                "Skipping suggestion %d: unknown transaction id %r", position, tid
            )
            continue
        if tid in seen:
            logger.warning(
                "Skipping suggestion %d: duplicate transaction id %r", position, tid
            )
            continue
        seen.add(tid)

        category = resolve_category(suggestion.category, allowed)
        if category != suggestion.category:
            logger.info(
                "Category %r for %s is not in the registry; using %r",
                suggestion.category,
                tid,
                FALLBACK_CATEGORY,
            )

        description = suggestion.updated_description if update_descriptions else None

        decisions.append(
            RowUpdateDecision(
                transaction_id=tid,
                row=identity_index[tid],
                category=category,
                description=description,
                touched_at=now,
                matched_transaction_id=suggestion.matched_transaction_id,
            )
        )

    return decisions
