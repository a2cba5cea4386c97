"""Build the categorisation request and the instruction text.

The instruction text depends only on the category registry, never on the
provider, so both providers receive byte-identical prompts.
"""

from __future__ import annotations

import json
from typing import Sequence

from ..models import (
    FALLBACK_CATEGORY,
    CategorisationRequest,
    ReferenceTransaction,
    UncategorisedTransaction,
)
from ..prompt.render_prompt import SYSTEM_TEMPLATE, render_template


def build_instructions(categories: Sequence[str]) -> str:
    """Render the system instructions for a given category registry."""
    context = {
        "allowed_categories_json": json.dumps(list(categories), ensure_ascii=False),
        "fallback_category": FALLBACK_CATEGORY,
    }
    return render_template(SYSTEM_TEMPLATE, context)


def compose_request(
    transactions: Sequence[UncategorisedTransaction],
    references: Sequence[ReferenceTransaction],
) -> CategorisationRequest:
    return CategorisationRequest(
        transactions=list(transactions),
        reference_transactions=list(references),
    )

