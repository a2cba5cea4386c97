"""Build the reference corpus of already-categorised rows.

The corpus is truncated to a configured maximum to keep the request inside
the provider's context window. Which rows survive depends on
:class:`~txn_categoriser.models.ReferenceOrder`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..models import ReferenceOrder, ReferenceTransaction
from ..sources.base import ColumnMap, SourceRow
from .cells import is_blank, parse_amount, parse_date, row_identity


def build_reference_corpus(
    rows: Sequence[SourceRow],
    columns: ColumnMap,
    max_count: int,
    *,
    order: ReferenceOrder | str = ReferenceOrder.SOURCE,
) -> list[ReferenceTransaction]:
    """Return up to ``max_count`` rows that have both a description and a category.

    Args:
        rows: Every row of the transactions table (visibility filter ignored)
        columns: Resolved column names
        max_count: Maximum number of reference transactions (>= 1)
        order: ``source`` keeps the first rows in table order; ``recent``
            keeps the newest by ``Date``, with undated rows last

    Returns:
        Reference transactions in the chosen order.
    """
    if max_count < 1:
        raise ValueError("max_count must be at least 1")
    order = ReferenceOrder(order)

    candidates = [
        row
        for row in rows
        if not is_blank(row.get(columns.original_description))
        and not is_blank(row.get(columns.category))
    ]

    if order is ReferenceOrder.RECENT:
        candidates = _newest_first(candidates, columns)

    return [_to_reference(row, columns) for row in candidates[:max_count]]


def _newest_first(rows: list[SourceRow], columns: ColumnMap) -> list[SourceRow]:
    dated: list[tuple[datetime, SourceRow]] = []
    undated: list[SourceRow] = []
    for row in rows:
        parsed = parse_date(row.get(columns.date))
        if parsed is None:
            undated.append(row)
        else:
            dated.append((parsed, row))
    # sorted() is stable, so rows sharing a date keep table order.
    dated_sorted = sorted(dated, key=lambda item: item[0], reverse=True)
    return [row for _, row in dated_sorted] + undated


def _to_reference(row: SourceRow, columns: ColumnMap) -> ReferenceTransaction:
    original = row.get(columns.original_description)
    updated = row.get(columns.description)
    return ReferenceTransaction(
        transaction_id=row_identity(row.get(columns.transaction_id), row.position),
        original_description=original,
        updated_description=original if is_blank(updated) else updated,
        category=row.get(columns.category),
        amount=parse_amount(row.get(columns.amount)),
        institution=row.get(columns.institution),
    )
