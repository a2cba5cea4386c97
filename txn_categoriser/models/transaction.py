"""Transaction models exchanged with the LLM.

``UncategorisedTransaction`` and ``ReferenceTransaction`` are built locally
from table rows and serialised into the request payload.
``SuggestedTransaction`` validates one untrusted entry from the model's
``suggested_transactions`` array.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class UncategorisedTransaction(BaseModel):
    """A row that still needs a category."""

    model_config = ConfigDict(extra="forbid")

    transaction_id: str
    original_description: str
    amount: float | None = None
    date: str | None = None
    institution: str | None = None

    @field_validator("transaction_id", mode="before")
    def _strip_id(cls, value: object) -> str:
        result = str(value if value is not None else "").strip()
        if not result:
            raise ValueError("transaction_id must not be empty")
        return result

    @field_validator("original_description", mode="before")
    def _require_description(cls, value: object) -> str:
        result = str(value if value is not None else "").strip()
        if not result:
            raise ValueError("original_description must not be empty")
        return result

    @field_validator("date", "institution", mode="before")
    def _optional_text(cls, value: object) -> str | None:
        return _clean_optional_text(value)


class ReferenceTransaction(BaseModel):
    """An already-categorised row sent as a matching exemplar."""

    model_config = ConfigDict(extra="forbid")

    transaction_id: str
    original_description: str
    updated_description: str
    category: str
    amount: float | None = None
    institution: str | None = None

    @field_validator("transaction_id", "original_description", "category", mode="before")
    def _strip_required(cls, value: object) -> str:
        result = str(value if value is not None else "").strip()
        if not result:
            raise ValueError("value must not be empty")
        return result

    @field_validator("updated_description", mode="before")
    def _strip_updated(cls, value: object) -> str:
        return str(value if value is not None else "").strip()

    @field_validator("institution", mode="before")
    def _optional_text(cls, value: object) -> str | None:
        return _clean_optional_text(value)


class CategorisationRequest(BaseModel):
    """The JSON payload sent to the model alongside the instructions."""

    transactions: list[UncategorisedTransaction] = Field(default_factory=list)
    reference_transactions: list[ReferenceTransaction] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class SuggestedTransaction(BaseModel):
    """One suggestion returned by the model. Never trusted until reconciled."""

    model_config = ConfigDict(extra="ignore")

    transaction_id: str
    updated_description: str | None = None
    category: str | None = None
    matched_transaction_id: str | None = None

    @field_validator("transaction_id", mode="before")
    def _coerce_id(cls, value: object) -> str:
        # Models sometimes echo numeric ids back as numbers.
        if value is None or isinstance(value, (dict, list, bool)):
            raise ValueError("transaction_id must be a string")
        result = str(value).strip()
        if not result:
            raise ValueError("transaction_id must not be empty")
        return result

    @field_validator("updated_description", "category", mode="before")
    def _text_or_none(cls, value: object) -> str | None:
        if not isinstance(value, str):
            return None
        return value.strip() or None

    @field_validator("matched_transaction_id", mode="before")
    def _matched_id(cls, value: object) -> str | None:
        if value is None or isinstance(value, (dict, list, bool)):
            return None
        return _clean_optional_text(value)
