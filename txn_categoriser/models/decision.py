"""Reconciled write decisions and run results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RowUpdateDecision:
    """The fields to write back for one pending row.

    Attributes:
        transaction_id: Identity of the row the suggestion was matched to
        row: Position of the row in the source table (write handle)
        category: Registry member or the fallback label
        description: Cleaned description, or ``None`` when descriptions are
            not being updated
        touched_at: When the decision was made
        matched_transaction_id: Reference row the model reported matching
    """

    transaction_id: str
    row: int
    category: str
    description: str | None
    touched_at: datetime
    matched_transaction_id: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Outcome of one categorisation run, safe to show to an operator."""

    success: bool
    message: str
    updated_count: int = 0
    error_type: str | None = None
    error_details: str | None = None
