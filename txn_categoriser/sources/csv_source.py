"""CSV-backed record source.

The transactions table is one CSV file with a header row. The category
registry is a second CSV file whose first column lists the allowed labels
(the first row is treated as a header). Cell writes are buffered and written
back in a single atomic replace on :meth:`CsvWorkbook.flush`.

Rows are kept as the raw cell lists read from the file, so a rewrite only
changes the buffered cells. Blank lines, cells beyond the header width and
columns that share a header name survive untouched.
"""

from __future__ import annotations

import codecs
import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Sequence

from ..config import ConfigurationError
from .base import SourceRow

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Excel's "CSV UTF-8" export starts with a byte-order mark.
DEFAULT_ENCODING = "utf-8-sig"


class CsvWorkbook:
    """Read transactions and categories from CSV files, write cells back."""

    def __init__(
        self,
        transactions_path: Path,
        categories_path: Path,
        *,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.transactions_path = Path(transactions_path)
        self.categories_path = Path(categories_path)
        self._encoding = encoding
        self._header_row: list[str] | None = None
        self._headers: list[str] | None = None
        self._column_index: dict[str, int] = {}
        self._rows: list[list[str]] | None = None
        self._has_bom = False
        self._pending: dict[tuple[int, int], Any] = {}

    def headers(self) -> list[str]:
        self._load()
        assert self._headers is not None
        return list(self._headers)

    def visible_rows(self) -> Iterable[SourceRow]:
        # CSV files have no view filter: every row is visible.
        return self.all_rows()

    def all_rows(self) -> Sequence[SourceRow]:
        """Every non-blank row. ``position`` is the row's line in the body."""
        self._load()
        assert self._rows is not None
        return [
            SourceRow(position=position, values=self._row_values(cells))
            for position, cells in enumerate(self._rows)
            if any(cell.strip() for cell in cells)
        ]

    def category_values(self) -> list[Any]:
        if not self.categories_path.exists():
            raise ConfigurationError(
                f"Categories table not found: {self.categories_path}"
            )
        with open(self.categories_path, newline="", encoding=self._encoding) as handle:
            reader = csv.reader(handle)
            next(reader, None)  # header
            return [row[0] if row else "" for row in reader]

    def write_cell(self, row: int, column: str, value: Any) -> None:
        self._load()
        assert self._rows is not None
        if not 0 <= row < len(self._rows):
            raise IndexError(f"Row {row} is outside the table body")
        if column not in self._column_index:
            raise KeyError(f"Unknown column '{column}'")
        self._pending[(row, self._column_index[column])] = value

    def flush(self) -> None:
        if not self._pending:
            return
        assert self._rows is not None and self._header_row is not None

        for (row, index), value in self._pending.items():
            cells = self._rows[row]
            if len(cells) <= index:
                cells.extend([""] * (index + 1 - len(cells)))
            cells[index] = "" if value is None else str(value)

        temp_file = self.transactions_path.with_suffix(
            self.transactions_path.suffix + ".tmp"
        )
        with open(temp_file, "w", newline="", encoding=self._write_encoding()) as handle:
            writer = csv.writer(handle)
            writer.writerow(self._header_row)
            writer.writerows(self._rows)
        temp_file.replace(self.transactions_path)

        logger.info(
            "Wrote %d cell(s) to %s", len(self._pending), self.transactions_path
        )
        self._pending.clear()

    def format_timestamp(self, moment: datetime) -> Any:
        return moment.strftime(TIMESTAMP_FORMAT)

    def _row_values(self, cells: list[str]) -> dict[str, str]:
        return {
            name: cells[index] if index < len(cells) else ""
            for name, index in self._column_index.items()
        }

    def _write_encoding(self) -> str:
        # Only write a byte-order mark back if the file had one.
        if self._encoding.lower().replace("_", "-") == "utf-8-sig" and not self._has_bom:
            return "utf-8"
        return self._encoding

    def _load(self) -> None:
        if self._rows is not None:
            return
        if not self.transactions_path.exists():
            raise ConfigurationError(
                f"Transactions table not found: {self.transactions_path}"
            )
        with open(self.transactions_path, "rb") as raw:
            self._has_bom = raw.read(len(codecs.BOM_UTF8)) == codecs.BOM_UTF8

        with open(
            self.transactions_path, newline="", encoding=self._encoding
        ) as handle:
            reader = csv.reader(handle)
            header_row = next(reader, None)
            if header_row is None:
                raise ConfigurationError(
                    f"Transactions table is empty: {self.transactions_path}"
                )
            rows = [list(raw) for raw in reader]

        headers = [h.strip() for h in header_row]
        column_index: dict[str, int] = {}
        for index, name in enumerate(headers):
            if name in column_index:
                logger.warning(
                    "Duplicate column '%s' in %s; using the first one",
                    name,
                    self.transactions_path,
                )
                continue
            column_index[name] = index

        self._header_row = header_row
        self._headers = headers
        self._column_index = column_index
        self._rows = rows
