from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from txn_categoriser.llm.json_utils import dump_compact_json
from txn_categoriser.models import (
    FALLBACK_CATEGORY,
    CategorisationRequest,
    ProviderName,
    ReferenceOrder,
    ReferenceTransaction,
    SuggestedTransaction,
    UncategorisedTransaction,
)


def test_enum_values() -> None:
    assert set(ProviderName.all_values()) == {"openai", "gemini"}
    assert set(ReferenceOrder.all_values()) == {"source", "recent"}
    assert FALLBACK_CATEGORY == "To Be Categorized"


def test_uncategorised_transaction_requires_description() -> None:
    with pytest.raises(ValidationError):
        UncategorisedTransaction(transaction_id="1", original_description="  ")


def test_uncategorised_transaction_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        UncategorisedTransaction(
            transaction_id="1", original_description="x", category="Groceries"
        )


def test_request_json_is_compact_and_keeps_unicode() -> None:
    request = CategorisationRequest(
        transactions=[
            UncategorisedTransaction(
                transaction_id="1", original_description="CAFÉ LUNA", amount=-4.5
            )
        ],
        reference_transactions=[
            ReferenceTransaction(
                transaction_id="r1",
                original_description="CAFÉ LUNA 22",
                updated_description="Café Luna",
                category="Dining",
            )
        ],
    )

    text = dump_compact_json(request.to_payload())

    assert ": " not in text
    assert "CAFÉ LUNA" in text
    data = json.loads(text)
    assert data["transactions"][0] == {
        "transaction_id": "1",
        "original_description": "CAFÉ LUNA",
        "amount": -4.5,
        "date": None,
        "institution": None,
    }
    assert data["reference_transactions"][0]["category"] == "Dining"


def test_suggestion_coerces_numeric_ids_and_ignores_extra_keys() -> None:
    suggestion = SuggestedTransaction.model_validate(
        {"transaction_id": 42, "category": " Groceries ", "confidence": 0.9}
    )
    assert suggestion.transaction_id == "42"
    assert suggestion.category == "Groceries"
    assert suggestion.updated_description is None


def test_suggestion_non_string_fields_become_none() -> None:
    suggestion = SuggestedTransaction.model_validate(
        {
            "transaction_id": "1",
            "category": 7,
            "updated_description": ["x"],
            "matched_transaction_id": None,
        }
    )
    assert suggestion.category is None
    assert suggestion.updated_description is None
    assert suggestion.matched_transaction_id is None


@pytest.mark.parametrize("bad_id", [None, "", "  ", True, {"id": 1}, [1]])
def test_suggestion_rejects_unusable_ids(bad_id) -> None:
    with pytest.raises(ValidationError):
        SuggestedTransaction.model_validate({"transaction_id": bad_id})


def test_suggestion_requires_an_object() -> None:
    with pytest.raises(ValidationError):
        SuggestedTransaction.model_validate("not-an-object")
