"""Select the batch of rows that still need a category.

Only rows with a non-empty ``Full Description`` and an empty ``Category``
are eligible. Selection stops once the configured batch size is reached,
so rows further down the table wait for a later run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..models import UncategorisedTransaction
from ..sources.base import ColumnMap, SourceRow
from .cells import format_date, is_blank, parse_amount, row_identity

logger = logging.getLogger(__name__)


@dataclass
class PendingBatch:
    """Rows selected for categorisation in one run.

    Attributes:
        transactions: The uncategorised transactions, in table order
        identity_index: Maps each transaction_id to its row position
    """

    transactions: list[UncategorisedTransaction] = field(default_factory=list)
    identity_index: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.transactions)

    def __bool__(self) -> bool:
        return bool(self.transactions)


def select_pending(
    rows: Iterable[SourceRow],
    columns: ColumnMap,
    max_batch_size: int,
) -> PendingBatch:
    """Collect up to ``max_batch_size`` uncategorised rows.

    Args:
        rows: Visible rows of the transactions table, in table order
        columns: Resolved column names
        max_batch_size: Maximum number of transactions to return (>= 1)

    Returns:
        A :class:`PendingBatch`; empty when no row needs work.

    Notes:
        - A row whose identity repeats an earlier selected row is skipped so
          that every suggestion maps back to exactly one row.
    """
    if max_batch_size < 1:
        raise ValueError("max_batch_size must be at least 1")

    batch = PendingBatch()
    for row in rows:
        description = row.get(columns.original_description)
        if is_blank(description) or not is_blank(row.get(columns.category)):
            continue

        identity = row_identity(row.get(columns.transaction_id), row.position)
        if identity in batch.identity_index:
            logger.warning(
                "Skipping row %d: transaction id %r already selected in this batch",
                row.position,
                identity,
            )
            continue

        batch.transactions.append(
            UncategorisedTransaction(
                transaction_id=identity,
                original_description=description,
                amount=parse_amount(row.get(columns.amount)),
                date=format_date(row.get(columns.date)),
                institution=row.get(columns.institution),
            )
        )
        batch.identity_index[identity] = row.position

        if len(batch.transactions) >= max_batch_size:
            break

    return batch
