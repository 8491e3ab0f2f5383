"""Shared pytest fixtures for suggestion-board tests."""

from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from suggestion_board.board import SuggestionBoard
from suggestion_board.config import StorageConfig
from suggestion_board.models import (
    StoreResult,
    Suggestion,
    SuggestionCategory,
    SuggestionType,
)
from suggestion_board.remote import RemoteStore
from suggestion_board.session import SessionState
from suggestion_board.storage import LocalStorage


def make_suggestion(suggestion_id: str = "S1", **overrides) -> Suggestion:
    """Build a suggestion with sensible defaults."""
    fields = {
        "id": suggestion_id,
        "title": f"Suggestion {suggestion_id}",
        "problem": "Something is not working well",
        "solution": "Do it differently",
        "impact": "Everyone benefits",
        "category": SuggestionCategory.OTHER,
        "type": SuggestionType.IMPROVEMENT,
        "author": "סטודנט #1234",
        "created_at": 1_700_000_000_000,
        "likes": 0,
        "views": 0,
    }
    fields.update(overrides)
    return Suggestion(**fields)


@pytest.fixture
def suggestion_factory():
    return make_suggestion


@pytest.fixture
def storage_path(tmp_path):
    """Path for a throwaway local storage database."""
    return tmp_path / "session.db"


@pytest.fixture
def storage(storage_path):
    return LocalStorage(storage_path)


@pytest.fixture
def session(storage):
    """An initialised session backed by temporary storage."""
    state = SessionState(storage, StorageConfig())
    state.init()
    return state


@pytest.fixture
def store():
    """A RemoteStore double whose operations all succeed by default.

    ``list_suggestions`` builds fresh objects on every call so tests can
    tell a refresh apart from the optimistic local state.
    """
    mock = MagicMock(spec=RemoteStore)
    mock.table = "suggestions"
    mock.server_rows = [{"id": "S1", "likes": 3}]

    async def _list():
        rows = [dict(row) for row in mock.server_rows]
        return StoreResult.success([make_suggestion(row.pop("id"), **row) for row in rows])

    mock.list_suggestions.side_effect = _list
    mock.set_like_count.return_value = StoreResult.success(1)
    mock.touch_view.return_value = StoreResult.success()
    return mock


@pytest_asyncio.fixture
async def board(store, session):
    """A started board holding the server rows."""
    b = SuggestionBoard(store, session)
    await b.start()
    yield b
    await b.drain()
