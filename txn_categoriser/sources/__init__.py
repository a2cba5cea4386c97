"""Record sources the categoriser can read from and write back to."""

from __future__ import annotations

from .base import ColumnMap, RecordSource, SourceRow, resolve_columns
from .csv_source import CsvWorkbook
from .memory import InMemoryWorkbook

__all__ = [
    "ColumnMap",
    "CsvWorkbook",
    "InMemoryWorkbook",
    "RecordSource",
    "SourceRow",
    "resolve_columns",
]
