from __future__ import annotations

import logging
from typing import Any, Iterable

from .cells import cell_text

logger = logging.getLogger(__name__)


def load_category_registry(values: Iterable[Any]) -> list[str]:
    """Return the allowed category labels in table order, skipping empty cells.

    Duplicates are kept; membership checks do not depend on them.
    """
    categories = [text for text in (cell_text(v) for v in values) if text]
    if not categories:
        logger.warning(
            "Categories table is empty; every suggestion will use the fallback category"
        )
    return categories
