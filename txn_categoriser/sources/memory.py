from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from .base import SourceRow


class InMemoryWorkbook:
    """Record source backed by Python lists.

    ``hidden_rows`` holds positions excluded from :meth:`visible_rows`, the way
    a filtered spreadsheet view hides rows from selection while the full table
    body still contains them.
    """

    def __init__(
        self,
        headers: Sequence[str],
        rows: Iterable[Mapping[str, Any]],
        categories: Iterable[Any] = (),
        *,
        hidden_rows: Iterable[int] = (),
    ) -> None:
        self._headers = [str(h).strip() for h in headers]
        self._rows: list[dict[str, Any]] = [
            {h: row.get(h) for h in self._headers} for row in rows
        ]
        self._categories = list(categories)
        self._hidden = set(hidden_rows)
        self.writes: list[tuple[int, str, Any]] = []
        self.flush_count = 0

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self._rows

    def headers(self) -> list[str]:
        return list(self._headers)

    def visible_rows(self) -> Iterable[SourceRow]:
        for position, values in enumerate(self._rows):
            if position in self._hidden:
                continue
            yield SourceRow(position=position, values=dict(values))

    def all_rows(self) -> Sequence[SourceRow]:
        return [
            SourceRow(position=position, values=dict(values))
            for position, values in enumerate(self._rows)
        ]

    def category_values(self) -> list[Any]:
        return list(self._categories)

    def write_cell(self, row: int, column: str, value: Any) -> None:
        if not 0 <= row < len(self._rows):
            raise IndexError(f"Row {row} is outside the table body")
        if column not in self._headers:
            raise KeyError(f"Unknown column '{column}'")
        self._rows[row][column] = value
        self.writes.append((row, column, value))

    def flush(self) -> None:
        self.flush_count += 1

    def format_timestamp(self, moment: datetime) -> Any:
        return moment
