from __future__ import annotations

import logging
from typing import Sequence

from ..models import RowUpdateDecision
from ..sources.base import ColumnMap, RecordSource

logger = logging.getLogger(__name__)


def apply_updates(
    source: RecordSource,
    decisions: Sequence[RowUpdateDecision],
    columns: ColumnMap,
) -> int:
    """Write each decision's cells back to its row and return the rows updated.

    Only the category cell, the description cell (when the decision carries
    one) and the AI Touched cell (when the table has that column) are
    written. A row whose write fails is logged and not counted.
    """
    updated = 0
    for decision in decisions:
        try:
            source.write_cell(decision.row, columns.category, decision.category)
            if decision.description is not None:
                source.write_cell(
                    decision.row, columns.description, decision.description
                )
            if columns.ai_touched is not None:
                source.write_cell(
                    decision.row,
                    columns.ai_touched,
                    source.format_timestamp(decision.touched_at),
                )
        except (IndexError, KeyError) as exc:
            logger.warning(
                "Could not update row %d (%s): %s",
                decision.row,
                decision.transaction_id,
                exc,
            )
            continue
        updated += 1

    if updated:
        source.flush()
    return updated
