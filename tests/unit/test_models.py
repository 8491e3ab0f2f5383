"""Tests for suggestion-board data models."""

import pytest

from suggestion_board.models import (
    Comment,
    StoreResult,
    Suggestion,
    SuggestionCategory,
    SuggestionDraft,
    SuggestionStatus,
    SuggestionType,
    new_comment_id,
    parse_category,
    parse_status,
    parse_type,
    require_category,
    require_type,
)


class TestEnumParsing:
    """Lenient parsing for server rows, strict parsing for user input."""

    def test_parse_by_value(self):
        assert parse_category("התנסות מעשית") == SuggestionCategory.PRACTICAL
        assert parse_type("יוזמה") == SuggestionType.INITIATIVE
        assert parse_status("בוצע בשטח") == SuggestionStatus.IMPLEMENTED

    def test_parse_by_name(self):
        assert parse_category("curriculum") == SuggestionCategory.CURRICULUM
        assert parse_type("IMPROVEMENT") == SuggestionType.IMPROVEMENT

    def test_parse_member_passthrough(self):
        assert parse_category(SuggestionCategory.NETWORKING) == SuggestionCategory.NETWORKING

    def test_unknown_values_fall_back(self):
        assert parse_category("gardening") == SuggestionCategory.OTHER
        assert parse_type(None) == SuggestionType.IMPROVEMENT
        assert parse_status("archived") == SuggestionStatus.PENDING

    def test_require_accepts_member_value_and_name(self):
        assert require_category(SuggestionCategory.PRACTICAL) == SuggestionCategory.PRACTICAL
        assert require_category("מתקנים וציוד") == SuggestionCategory.FACILITIES
        assert require_type("initiative") == SuggestionType.INITIATIVE

    @pytest.mark.parametrize("value", ["gardening", "", None, 3])
    def test_require_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            require_category(value)
        with pytest.raises(ValueError):
            require_type(value)


class TestComment:
    """Comment dataclass."""

    def test_create_assigns_id_and_timestamp(self):
        comment = Comment.create("Nice", "סטודנט #1234")
        assert len(comment.id) == 9
        assert comment.id.isalnum()
        assert comment.created_at > 0
        assert comment.author == "סטודנט #1234"

    def test_ids_differ(self):
        ids = {new_comment_id() for _ in range(50)}
        assert len(ids) == 50

    def test_to_dict_uses_wire_names(self):
        comment = Comment(id="c1", content="hi", author="a", created_at=5)
        assert comment.to_dict() == {
            "id": "c1",
            "content": "hi",
            "author": "a",
            "createdAt": 5,
        }

    def test_from_dict(self):
        comment = Comment.from_dict({"id": "c1", "content": "hi", "author": "a", "createdAt": 5})
        assert comment == Comment(id="c1", content="hi", author="a", created_at=5)


class TestSuggestion:
    """Suggestion dataclass."""

    def test_from_dict_full_row(self):
        suggestion = Suggestion.from_dict(
            {
                "id": "abc",
                "title": "T",
                "problem": "P",
                "solution": "S",
                "impact": "I",
                "category": "אחר",
                "type": "הצעה לשיפור",
                "status": 'נבחן ע"י הסגל',
                "author": "סטודנט #1000",
                "createdAt": 1_700_000_000_000,
                "likes": 4,
                "views": 9,
                "comments": [{"id": "c1", "content": "x", "author": "y", "createdAt": 1}],
            }
        )
        assert suggestion.id == "abc"
        assert suggestion.status == SuggestionStatus.REVIEWED
        assert suggestion.created_at == 1_700_000_000_000
        assert suggestion.likes == 4
        assert suggestion.comments[0].id == "c1"

    def test_from_dict_tolerates_nulls(self):
        """Null counters and comments read as zero and empty."""
        suggestion = Suggestion.from_dict(
            {"id": 7, "title": "T", "likes": None, "views": None, "comments": None}
        )
        assert suggestion.id == "7"
        assert suggestion.likes == 0
        assert suggestion.views == 0
        assert suggestion.comments == []

    def test_malformed_comments_do_not_break_row(self):
        """Non-object comments are dropped, missing ids are filled in."""
        suggestion = Suggestion.from_dict(
            {
                "id": "s",
                "comments": [
                    {"id": "c1", "content": "ok", "author": "a", "createdAt": 1},
                    {"content": "anonymous"},
                    None,
                ],
            }
        )
        assert [c.content for c in suggestion.comments] == ["ok", "anonymous"]
        assert suggestion.comments[0].id == "c1"
        assert len(suggestion.comments[1].id) == 9

    def test_negative_likes_clamped(self):
        suggestion = Suggestion.from_dict({"id": "a", "likes": -3})
        assert suggestion.likes == 0

    def test_to_dict_uses_enum_values(self):
        suggestion = Suggestion(
            id="a",
            title="T",
            problem="P",
            solution="S",
            impact="I",
            category=SuggestionCategory.PRACTICAL,
            type=SuggestionType.INITIATIVE,
            author="x",
            created_at=1,
        )
        data = suggestion.to_dict()
        assert data["category"] == "התנסות מעשית"
        assert data["type"] == "יוזמה"
        assert data["status"] == "בבדיקה"
        assert data["createdAt"] == 1
        assert data["comments"] == []


class TestSuggestionDraft:
    """Draft completeness and readiness scoring."""

    def test_defaults(self):
        draft = SuggestionDraft()
        assert draft.category == SuggestionCategory.OTHER
        assert draft.type == SuggestionType.INITIATIVE
        assert draft.readiness() == 0
        assert not draft.is_complete()

    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"title": "abcd"}, 25),
            ({"title": "abc"}, 0),
            ({"title": "   abcd   "}, 25),
            ({"problem": "x" * 11}, 25),
            ({"problem": "x" * 10}, 0),
            ({"solution": "x" * 11, "impact": "x" * 6}, 50),
            ({"title": "abcd", "problem": "x" * 11, "solution": "x" * 11, "impact": "x" * 6}, 100),
        ],
    )
    def test_readiness(self, fields, expected):
        assert SuggestionDraft(**fields).readiness() == expected

    def test_missing_fields(self):
        draft = SuggestionDraft(title="T", solution="  ")
        assert draft.missing_fields() == ["problem", "solution", "impact"]

    def test_complete(self):
        draft = SuggestionDraft(title="T", problem="P", solution="S", impact="I")
        assert draft.is_complete()
        assert draft.missing_fields() == []

    def test_from_dict_handles_missing_and_bad_enums(self):
        draft = SuggestionDraft.from_dict({"title": "T", "category": "???", "type": None})
        assert draft.title == "T"
        assert draft.problem == ""
        assert draft.category == SuggestionCategory.OTHER
        assert draft.type == SuggestionType.INITIATIVE

    def test_dict_round_trip(self):
        draft = SuggestionDraft(
            title="T",
            problem="P",
            category=SuggestionCategory.CURRICULUM,
            type=SuggestionType.IMPROVEMENT,
        )
        assert SuggestionDraft.from_dict(draft.to_dict()) == draft


class TestStoreResult:
    def test_success(self):
        result = StoreResult.success([1, 2])
        assert result.ok
        assert result.data == [1, 2]

    def test_success_without_data(self):
        assert StoreResult.success().ok

    def test_failure(self):
        result = StoreResult.failure("bad")
        assert not result.ok
        assert result.error == "bad"

    def test_failure_never_empty(self):
        assert StoreResult.failure("").error == "Unknown error"
