"""Public model exports for the project.

Import from here: ``from txn_categoriser.models import SuggestedTransaction``.
"""

from __future__ import annotations

from .decision import RowUpdateDecision, RunResult
from .enums import FALLBACK_CATEGORY, ProviderName, ReferenceOrder
from .transaction import (
    CategorisationRequest,
    ReferenceTransaction,
    SuggestedTransaction,
    UncategorisedTransaction,
)

__all__ = [
    "CategorisationRequest",
    "FALLBACK_CATEGORY",
    "ProviderName",
    "ReferenceOrder",
    "ReferenceTransaction",
    "RowUpdateDecision",
    "RunResult",
    "SuggestedTransaction",
    "UncategorisedTransaction",
]
