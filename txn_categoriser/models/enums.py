"""Enumerations shared across the categoriser."""

from __future__ import annotations

from enum import Enum

FALLBACK_CATEGORY = "To Be Categorized"


class ProviderName(str, Enum):
    """LLM providers a run can be routed to."""

    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class ReferenceOrder(str, Enum):
    """Order in which reference transactions are kept before truncation.

    Values:
        SOURCE: First rows encountered in the table, top to bottom.
        RECENT: Newest ``Date`` first; undated rows keep table order at the end.
    """

    SOURCE = "source"
    RECENT = "recent"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]
