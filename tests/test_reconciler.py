"""Tests for validating model suggestions into row decisions."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from txn_categoriser.categoriser.reconciler import reconcile, resolve_category
from txn_categoriser.models import FALLBACK_CATEGORY

NOW = datetime(2024, 3, 5, 9, 30)
CATEGORIES = ["Groceries", "Gas", "Dining"]
INDEX = {"a": 0, "b": 3, "c": 7}


def _reconcile(suggestions, update_descriptions=False):
    return reconcile(
        suggestions,
        INDEX,
        CATEGORIES,
        update_descriptions=update_descriptions,
        now=NOW,
    )


def test_resolve_category() -> None:
    allowed = set(CATEGORIES)
    assert resolve_category("Gas", allowed) == "Gas"
    assert resolve_category("Fuel", allowed) == FALLBACK_CATEGORY
    assert resolve_category(None, allowed) == FALLBACK_CATEGORY
    assert resolve_category("gas", allowed) == FALLBACK_CATEGORY


def test_valid_suggestion_becomes_decision() -> None:
    decisions = _reconcile(
        [
            {
                "transaction_id": "b",
                "updated_description": "Whole Foods",
                "category": "Groceries",
                "matched_transaction_id": "r9",
            }
        ]
    )

    assert len(decisions) == 1
    decision = decisions[0]
    assert decision.transaction_id == "b"
    assert decision.row == 3
    assert decision.category == "Groceries"
    assert decision.description is None
    assert decision.touched_at == NOW
    assert decision.matched_transaction_id == "r9"


def test_description_is_written_only_when_enabled() -> None:
    suggestion = {"transaction_id": "a", "updated_description": "Shell", "category": "Gas"}
    assert _reconcile([suggestion], update_descriptions=True)[0].description == "Shell"
    assert _reconcile([suggestion], update_descriptions=False)[0].description is None


def test_unknown_category_uses_fallback() -> None:
    decisions = _reconcile([{"transaction_id": "a", "category": "Unknown Category"}])
    assert decisions[0].category == FALLBACK_CATEGORY


def test_missing_category_uses_fallback() -> None:
    decisions = _reconcile([{"transaction_id": "a"}])
    assert decisions[0].category == FALLBACK_CATEGORY


def test_unknown_transaction_id_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        decisions = _reconcile(
            [
                {"transaction_id": "zzz", "category": "Gas"},
                {"transaction_id": "c", "category": "Dining"},
            ]
        )

    assert [d.transaction_id for d in decisions] == ["c"]
    assert "unknown transaction id" in caplog.text


def test_duplicate_suggestions_keep_first() -> None:
    decisions = _reconcile(
        [
            {"transaction_id": "a", "category": "Gas"},
            {"transaction_id": "a", "category": "Dining"},
        ]
    )
    assert len(decisions) == 1
    assert decisions[0].category == "Gas"


def test_malformed_entries_are_skipped_individually() -> None:
    decisions = _reconcile(
        [
            "just a string",
            None,
            {"category": "Gas"},
            {"transaction_id": {"nested": True}, "category": "Gas"},
            {"transaction_id": "a", "category": "Gas"},
        ]
    )
    assert [d.transaction_id for d in decisions] == ["a"]


def test_numeric_ids_match_string_identities() -> None:
    decisions = reconcile(
        [{"transaction_id": 1001, "category": "Gas"}],
        {"1001": 2},
        CATEGORIES,
        update_descriptions=False,
        now=NOW,
    )
    assert decisions[0].row == 2


def test_empty_suggestions_produce_no_decisions() -> None:
    assert _reconcile([]) == []
