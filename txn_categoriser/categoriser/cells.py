"""Normalisation of raw table cell values.

Spreadsheet and CSV cells arrive as strings, numbers, dates or ``None``.
These helpers turn them into the plain values the request models expect.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

# Day zero of spreadsheet serial dates (accounts for the 1900 leap-year bug).
_SERIAL_EPOCH = datetime(1899, 12, 30)
_SERIAL_RANGE = (1.0, 2958465.0)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%d %b %Y", "%b %d, %Y")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def cell_text(value: Any) -> str:
    """Render a cell as trimmed text; whole floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def row_identity(value: Any, position: int) -> str:
    """Return the row's identity, or a positional surrogate when the cell is empty.

    Surrogates (``row-<position>``) are only meaningful for the current run.
    """
    text = cell_text(value)
    return text or f"row-{position}"


def parse_amount(value: Any) -> float | None:
    """Parse an amount cell. Currency symbols, separators and ``(x)`` negatives are accepted."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)

    text = str(value).strip()
    if not text:
        return None
    negative = text.startswith("(") and text.endswith(")")
    cleaned = text.strip("()").replace(",", "").replace("$", "").replace(" ", "")
    try:
        amount = float(Decimal(cleaned))
    except (InvalidOperation, ValueError):
        return None
    return -abs(amount) if negative else amount


def format_date(value: Any) -> str | None:
    """Render a date cell for the request payload without reinterpreting it."""
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return cell_text(value)


def parse_date(value: Any) -> datetime | None:
    """Best-effort date parsing, used only to order reference rows."""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        serial = float(value)
        if _SERIAL_RANGE[0] <= serial <= _SERIAL_RANGE[1]:
            return _SERIAL_EPOCH + timedelta(days=serial)
        return None

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None
