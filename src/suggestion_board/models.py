"""
Data models for suggestion-board.

Field names follow Python conventions; ``to_dict``/``from_dict`` translate
to and from the column names used by the remote ``suggestions`` table.
"""

import logging
import random
import string
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SuggestionCategory(str, Enum):
    """Topic a suggestion belongs to."""

    CURRICULUM = "תכנית לימודים"
    FACILITIES = "מתקנים וציוד"
    NETWORKING = "נטוורקינג ואירועים"
    PRACTICAL = "התנסות מעשית"
    OTHER = "אחר"


class SuggestionType(str, Enum):
    """Kind of post."""

    INITIATIVE = "יוזמה"
    IMPROVEMENT = "הצעה לשיפור"


class SuggestionStatus(str, Enum):
    """Review status. Only changed by staff, never by this client."""

    PENDING = "בבדיקה"
    REVIEWED = 'נבחן ע"י הסגל'
    ACCEPTED = "התקבל לביצוע"
    IMPLEMENTED = "בוצע בשטח"


def _coerce_enum(enum_cls: type[Enum], value: Any, default: Enum | None = None) -> Any:
    """
    Accept an enum member, value or member name.

    Anything else falls back to ``default``, or raises ValueError when no
    default is given.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        pass
    if isinstance(value, str) and value.upper() in enum_cls.__members__:
        return enum_cls[value.upper()]
    if default is None:
        raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}")
    return default


def parse_category(value: Any) -> SuggestionCategory:
    return _coerce_enum(SuggestionCategory, value, SuggestionCategory.OTHER)


def parse_type(value: Any) -> SuggestionType:
    return _coerce_enum(SuggestionType, value, SuggestionType.IMPROVEMENT)


def parse_status(value: Any) -> SuggestionStatus:
    return _coerce_enum(SuggestionStatus, value, SuggestionStatus.PENDING)


def require_category(value: Any) -> SuggestionCategory:
    """Strict form of ``parse_category`` for user input."""
    return _coerce_enum(SuggestionCategory, value)


def require_type(value: Any) -> SuggestionType:
    """Strict form of ``parse_type`` for user input."""
    return _coerce_enum(SuggestionType, value)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_comment_id() -> str:
    """Generate a short client-side comment id (9 base-36 characters)."""
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choices(alphabet, k=9))


@dataclass
class Comment:
    """A comment embedded in a suggestion's ``comments`` column."""

    id: str
    content: str
    author: str
    created_at: int

    @classmethod
    def create(cls, content: str, author: str) -> "Comment":
        """Build a new comment with a client-assigned id and timestamp."""
        return cls(
            id=new_comment_id(),
            content=content,
            author=author,
            created_at=now_ms(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "id": self.id,
            "content": self.content,
            "author": self.author,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        """Create from the wire representation."""
        return cls(
            id=str(data["id"]),
            content=data.get("content", ""),
            author=data.get("author", ""),
            created_at=int(data.get("createdAt") or 0),
        )


def _parse_comments(suggestion_id: Any, raw: Any) -> list[Comment]:
    """
    Read the embedded comment list of a row.

    The column is nullable JSON, so malformed entries are possible. Non-object
    entries are dropped and comments without an id get a fresh one; neither
    prevents the row from loading.
    """
    comments = []
    for item in raw or []:
        if not isinstance(item, dict):
            logger.warning(f"Dropping malformed comment on {suggestion_id}: {item!r}")
            continue
        if not item.get("id"):
            logger.warning(f"Comment on {suggestion_id} has no id, assigning one")
            item = {**item, "id": new_comment_id()}
        comments.append(Comment.from_dict(item))
    return comments


@dataclass
class Suggestion:
    """A user-submitted post with engagement counters."""

    id: str
    title: str
    problem: str
    solution: str
    impact: str
    category: SuggestionCategory
    type: SuggestionType
    author: str
    created_at: int
    status: SuggestionStatus = SuggestionStatus.PENDING
    likes: int = 0
    views: int = 0
    comments: list[Comment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row for the ``suggestions`` table."""
        return {
            "id": self.id,
            "title": self.title,
            "problem": self.problem,
            "solution": self.solution,
            "impact": self.impact,
            "category": self.category.value,
            "type": self.type.value,
            "status": self.status.value,
            "author": self.author,
            "createdAt": self.created_at,
            "likes": self.likes,
            "views": self.views,
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Suggestion":
        """Create from a ``suggestions`` table row."""
        comments = _parse_comments(data.get("id"), data.get("comments"))
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            problem=data.get("problem", ""),
            solution=data.get("solution", ""),
            impact=data.get("impact", ""),
            category=parse_category(data.get("category")),
            type=parse_type(data.get("type")),
            status=parse_status(data.get("status")),
            author=data.get("author", ""),
            created_at=int(data.get("createdAt") or 0),
            likes=max(0, int(data.get("likes") or 0)),
            views=max(0, int(data.get("views") or 0)),
            comments=comments,
        )


@dataclass
class SuggestionDraft:
    """
    An in-progress submission.

    Persisted locally on every change so a reload does not lose work.
    """

    title: str = ""
    problem: str = ""
    solution: str = ""
    impact: str = ""
    category: SuggestionCategory = SuggestionCategory.OTHER
    type: SuggestionType = SuggestionType.INITIATIVE

    def is_complete(self) -> bool:
        """All free-text fields are filled in."""
        return all(
            value.strip()
            for value in (self.title, self.problem, self.solution, self.impact)
        )

    def missing_fields(self) -> list[str]:
        """Names of free-text fields that are still empty."""
        return [
            name
            for name in ("title", "problem", "solution", "impact")
            if not getattr(self, name).strip()
        ]

    def readiness(self) -> int:
        """
        Score how far along the draft is, from 0 to 100.

        Each of the four text fields contributes 25 once it passes a
        minimum length.
        """
        score = 0
        if len(self.title.strip()) > 3:
            score += 25
        if len(self.problem.strip()) > 10:
            score += 25
        if len(self.solution.strip()) > 10:
            score += 25
        if len(self.impact.strip()) > 5:
            score += 25
        return score

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "problem": self.problem,
            "solution": self.solution,
            "impact": self.impact,
            "category": self.category.value,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuggestionDraft":
        return cls(
            title=data.get("title") or "",
            problem=data.get("problem") or "",
            solution=data.get("solution") or "",
            impact=data.get("impact") or "",
            category=_coerce_enum(
                SuggestionCategory, data.get("category"), SuggestionCategory.OTHER
            ),
            type=_coerce_enum(
                SuggestionType, data.get("type"), SuggestionType.INITIATIVE
            ),
        )


@dataclass
class StoreResult(Generic[T]):
    """Outcome of a remote store operation: a value or an error message."""

    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> "StoreResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: str) -> "StoreResult[T]":
        return cls(error=error or "Unknown error")
