"""Record source contract and column resolution.

A record source exposes a transactions table (named columns, stable row
positions) and a single-column categories table. The pipeline only reads
rows through :class:`RecordSource` and only writes individual cells, so no
unrelated column is ever touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Protocol, Sequence

from ..config import ConfigurationError

logger = logging.getLogger(__name__)

TRANSACTION_ID_COL_NAME = "Transaction ID"
ORIGINAL_DESCRIPTION_COL_NAME = "Full Description"
DESCRIPTION_COL_NAME = "Description"
CATEGORY_COL_NAME = "Category"
DATE_COL_NAME = "Date"
AMOUNT_COL_NAME = "Amount"
INSTITUTION_COL_NAME = "Institution"
AI_TOUCHED_COL_NAME = "AI Touched"

REQUIRED_COLUMNS: tuple[str, ...] = (
    TRANSACTION_ID_COL_NAME,
    ORIGINAL_DESCRIPTION_COL_NAME,
    DESCRIPTION_COL_NAME,
    CATEGORY_COL_NAME,
    DATE_COL_NAME,
    AMOUNT_COL_NAME,
)


@dataclass(frozen=True)
class SourceRow:
    """A single table row.

    Attributes:
        position: Zero-based index in the full table body; used as the write handle
        values: Cell values keyed by column name
    """

    position: int
    values: Mapping[str, Any]

    def get(self, column: str | None) -> Any:
        if column is None:
            return None
        return self.values.get(column)


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column names for one run. Optional columns may be ``None``."""

    transaction_id: str
    original_description: str
    description: str
    category: str
    date: str
    amount: str
    institution: str | None
    ai_touched: str | None


class RecordSource(Protocol):
    """Shared contract for tabular transaction sources."""

    def headers(self) -> list[str]:
        """Column names of the transactions table, in table order."""
        ...

    def visible_rows(self) -> Iterable[SourceRow]:
        """Rows that pass the source's visibility filter, in table order."""
        ...

    def all_rows(self) -> Sequence[SourceRow]:
        """Every row of the transactions table, read in one batch."""
        ...

    def category_values(self) -> list[Any]:
        """Raw cell values of the categories table's first column."""
        ...

    def write_cell(self, row: int, column: str, value: Any) -> None:
        """Write a single cell, addressed by row position and column name."""
        ...

    def flush(self) -> None:
        """Persist buffered writes."""
        ...

    def format_timestamp(self, moment: datetime) -> Any:
        """Convert a timestamp into the cell representation this source stores."""
        ...


def resolve_columns(headers: Sequence[str]) -> ColumnMap:
    """Map the transaction table headers onto the columns the pipeline uses.

    Raises:
        ConfigurationError: If any required column is absent
    """
    present = {str(h).strip() for h in headers if h is not None}
    missing = [name for name in REQUIRED_COLUMNS if name not in present]
    if missing:
        raise ConfigurationError(
            "Required columns not found in Transactions table: " + ", ".join(missing)
        )

    ai_touched = AI_TOUCHED_COL_NAME if AI_TOUCHED_COL_NAME in present else None
    if ai_touched is None:
        logger.warning(
            "%s column not found in Transactions table; timestamps will not be written",
            AI_TOUCHED_COL_NAME,
        )

    return ColumnMap(
        transaction_id=TRANSACTION_ID_COL_NAME,
        original_description=ORIGINAL_DESCRIPTION_COL_NAME,
        description=DESCRIPTION_COL_NAME,
        category=CATEGORY_COL_NAME,
        date=DATE_COL_NAME,
        amount=AMOUNT_COL_NAME,
        institution=INSTITUTION_COL_NAME if INSTITUTION_COL_NAME in present else None,
        ai_touched=ai_touched,
    )
