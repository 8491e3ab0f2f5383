"""
Read-only projections of the suggestion list for display.
"""

from collections.abc import Iterable
from enum import Enum

from .models import Suggestion, SuggestionCategory, SuggestionType


class SortOrder(str, Enum):
    """Feed ordering."""

    RECENT = "recent"
    POPULAR = "popular"


def matches_search(suggestion: Suggestion, search: str) -> bool:
    """Case-insensitive substring match on title or problem."""
    needle = search.lower()
    return needle in suggestion.title.lower() or needle in (suggestion.problem or "").lower()


def filter_suggestions(
    suggestions: Iterable[Suggestion],
    category: SuggestionCategory | None = None,
    suggestion_type: SuggestionType | None = None,
    search: str = "",
    sort: SortOrder = SortOrder.RECENT,
) -> list[Suggestion]:
    """
    Filter and sort suggestions for the feed.

    ``None`` for category or type means no filtering on that field.
    Sorting is stable, so equal keys keep their input order. The input
    is never modified.
    """
    result = [
        s
        for s in suggestions
        if (category is None or s.category == category)
        and (suggestion_type is None or s.type == suggestion_type)
        and matches_search(s, search)
    ]

    if SortOrder(sort) == SortOrder.POPULAR:
        return sorted(result, key=lambda s: s.likes, reverse=True)
    return sorted(result, key=lambda s: s.created_at, reverse=True)
