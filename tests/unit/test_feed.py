"""Tests for feed filtering and sorting."""

import pytest

from suggestion_board.feed import SortOrder, filter_suggestions
from suggestion_board.models import SuggestionCategory, SuggestionType


@pytest.fixture
def suggestions(suggestion_factory):
    return [
        suggestion_factory(
            "old-popular",
            title="Evening lab hours",
            problem="The lab closes early",
            category=SuggestionCategory.FACILITIES,
            type=SuggestionType.IMPROVEMENT,
            created_at=1000,
            likes=10,
        ),
        suggestion_factory(
            "new",
            title="Founder talks",
            problem="No contact with alumni",
            category=SuggestionCategory.NETWORKING,
            type=SuggestionType.INITIATIVE,
            created_at=3000,
            likes=2,
        ),
        suggestion_factory(
            "mid",
            title="Practical course",
            problem="Too much theory in the LAB sessions",
            category=SuggestionCategory.CURRICULUM,
            type=SuggestionType.INITIATIVE,
            created_at=2000,
            likes=2,
        ),
    ]


class TestFilterSuggestions:
    def test_default_is_recent_first(self, suggestions):
        result = filter_suggestions(suggestions)
        assert [s.id for s in result] == ["new", "mid", "old-popular"]

    def test_popular_sort_is_stable(self, suggestions):
        """Ties keep their input order."""
        result = filter_suggestions(suggestions, sort=SortOrder.POPULAR)
        assert [s.id for s in result] == ["old-popular", "new", "mid"]

    def test_sort_accepts_string(self, suggestions):
        result = filter_suggestions(suggestions, sort="popular")
        assert result[0].id == "old-popular"

    def test_filter_by_category(self, suggestions):
        result = filter_suggestions(suggestions, category=SuggestionCategory.NETWORKING)
        assert [s.id for s in result] == ["new"]

    def test_filter_by_type(self, suggestions):
        result = filter_suggestions(suggestions, suggestion_type=SuggestionType.INITIATIVE)
        assert [s.id for s in result] == ["new", "mid"]

    def test_search_matches_title_or_problem_case_insensitively(self, suggestions):
        result = filter_suggestions(suggestions, search="lab")
        assert [s.id for s in result] == ["mid", "old-popular"]

    def test_search_no_match(self, suggestions):
        assert filter_suggestions(suggestions, search="parking") == []

    def test_input_not_modified(self, suggestions):
        before = [s.id for s in suggestions]
        filter_suggestions(suggestions, sort=SortOrder.POPULAR)
        assert [s.id for s in suggestions] == before

    def test_deterministic(self, suggestions):
        first = filter_suggestions(suggestions, search="a", sort=SortOrder.POPULAR)
        second = filter_suggestions(suggestions, search="a", sort=SortOrder.POPULAR)
        assert [s.id for s in first] == [s.id for s in second]
