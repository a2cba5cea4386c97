"""Tests for the CSV-backed record source."""

from __future__ import annotations

import codecs
import csv
import sys
from datetime import datetime
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from txn_categoriser.categoriser.write_back import apply_updates
from txn_categoriser.config import ConfigurationError
from txn_categoriser.models import RowUpdateDecision
from txn_categoriser.sources import CsvWorkbook, resolve_columns

TRANSACTIONS_CSV = (
    "Date,Description,Category,Amount,Institution,Transaction ID,Full Description,AI Touched,Notes\n"
    "2024-03-01,,,-54.20,Chase,t1,WHOLEFDS MKT #10234,,weekly shop\n"
    ",,,,,,,,\n"
    "2024-02-28,Shell,Gas,-40.00,Chase,t2,SHELL OIL 5744,,\n"
)


def _write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    transactions = tmp_path / "transactions.csv"
    transactions.write_text(TRANSACTIONS_CSV, encoding="utf-8")
    categories = tmp_path / "categories.csv"
    categories.write_text("Category,Group\nGroceries,Food\n,\nGas,Auto\n", encoding="utf-8")
    return transactions, categories


def test_reads_headers_rows_and_categories(tmp_path: Path) -> None:
    workbook = CsvWorkbook(*_write_inputs(tmp_path))

    columns = resolve_columns(workbook.headers())
    rows = workbook.all_rows()

    assert columns.ai_touched == "AI Touched"
    assert [row.position for row in rows] == [0, 2]
    assert rows[0].get("Full Description") == "WHOLEFDS MKT #10234"
    assert [row.position for row in workbook.visible_rows()] == [0, 2]
    assert workbook.category_values() == ["Groceries", "", "Gas"]


def test_flush_persists_buffered_writes(tmp_path: Path) -> None:
    transactions, categories = _write_inputs(tmp_path)
    workbook = CsvWorkbook(transactions, categories)

    workbook.write_cell(0, "Category", "Groceries")
    workbook.write_cell(0, "AI Touched", workbook.format_timestamp(datetime(2024, 3, 5, 9, 30)))
    assert "Groceries" not in transactions.read_text(encoding="utf-8").splitlines()[1]

    workbook.flush()

    with open(transactions, newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["Category"] == "Groceries"
    assert rows[0]["AI Touched"] == "2024-03-05 09:30:00"
    assert rows[0]["Notes"] == "weekly shop"
    assert rows[1]["Category"] == ""
    assert rows[2]["Category"] == "Gas"
    assert not (tmp_path / "transactions.csv.tmp").exists()


def test_write_to_unknown_cell_raises(tmp_path: Path) -> None:
    workbook = CsvWorkbook(*_write_inputs(tmp_path))

    with pytest.raises(IndexError):
        workbook.write_cell(5, "Category", "Gas")
    with pytest.raises(KeyError):
        workbook.write_cell(0, "Merchant", "Gas")


def test_missing_transactions_file_is_configuration_error(tmp_path: Path) -> None:
    _, categories = _write_inputs(tmp_path)
    workbook = CsvWorkbook(tmp_path / "missing.csv", categories)

    with pytest.raises(ConfigurationError, match="Transactions table not found"):
        workbook.headers()


def test_missing_categories_file_is_configuration_error(tmp_path: Path) -> None:
    transactions, _ = _write_inputs(tmp_path)
    workbook = CsvWorkbook(transactions, tmp_path / "missing.csv")

    with pytest.raises(ConfigurationError, match="Categories table not found"):
        workbook.category_values()


def test_empty_transactions_file_is_configuration_error(tmp_path: Path) -> None:
    transactions = tmp_path / "transactions.csv"
    transactions.write_text("", encoding="utf-8")
    workbook = CsvWorkbook(transactions, tmp_path / "categories.csv")

    with pytest.raises(ConfigurationError, match="empty"):
        workbook.headers()


def test_flush_only_changes_written_cells(tmp_path: Path) -> None:
    transactions = tmp_path / "transactions.csv"
    transactions.write_text(
        "Transaction ID,Full Description,Description,Category,Date,Amount,Notes,Notes\n"
        "t1,WHOLEFDS,,,2024-01-01,1,keep-a,keep-b,extra-cell\n"
        "\n"
        "t2,SHELL,Shell,Gas,2024-01-02,2\n",
        encoding="utf-8",
    )
    workbook = CsvWorkbook(transactions, tmp_path / "categories.csv")
    columns = resolve_columns(workbook.headers())

    rows = workbook.all_rows()
    assert [row.position for row in rows] == [0, 2]
    assert rows[0].get("Notes") == "keep-a"

    apply_updates(
        workbook,
        [
            RowUpdateDecision(
                transaction_id="t1",
                row=0,
                category="Groceries",
                description=None,
                touched_at=datetime(2024, 3, 5, 9, 30),
            )
        ],
        columns,
    )

    assert transactions.read_text(encoding="utf-8").splitlines() == [
        "Transaction ID,Full Description,Description,Category,Date,Amount,Notes,Notes",
        "t1,WHOLEFDS,,Groceries,2024-01-01,1,keep-a,keep-b,extra-cell",
        "",
        "t2,SHELL,Shell,Gas,2024-01-02,2",
    ]


def test_write_beyond_short_row_pads_cells(tmp_path: Path) -> None:
    transactions, categories = _write_inputs(tmp_path)
    transactions.write_text(
        "Transaction ID,Full Description,Category,Notes\nt1,SHELL\n", encoding="utf-8"
    )
    workbook = CsvWorkbook(transactions, categories)

    workbook.write_cell(0, "Category", "Gas")
    workbook.flush()

    assert transactions.read_text(encoding="utf-8").splitlines()[1] == "t1,SHELL,Gas"


def test_reads_byte_order_mark_and_keeps_it(tmp_path: Path) -> None:
    transactions = tmp_path / "transactions.csv"
    transactions.write_bytes(codecs.BOM_UTF8 + TRANSACTIONS_CSV.encode("utf-8"))
    categories = tmp_path / "categories.csv"
    categories.write_bytes(codecs.BOM_UTF8 + b"Category\nGroceries\n")
    workbook = CsvWorkbook(transactions, categories)

    columns = resolve_columns(workbook.headers())
    assert columns.transaction_id == "Transaction ID"
    assert workbook.all_rows()[0].get("Transaction ID") == "t1"
    assert workbook.category_values() == ["Groceries"]

    workbook.write_cell(0, "Category", "Groceries")
    workbook.flush()

    data = transactions.read_bytes()
    assert data.startswith(codecs.BOM_UTF8)
    assert not data[len(codecs.BOM_UTF8):].startswith(codecs.BOM_UTF8)


def test_no_byte_order_mark_added_to_plain_files(tmp_path: Path) -> None:
    transactions, categories = _write_inputs(tmp_path)
    workbook = CsvWorkbook(transactions, categories)

    workbook.write_cell(0, "Category", "Groceries")
    workbook.flush()

    assert not transactions.read_bytes().startswith(codecs.BOM_UTF8)
