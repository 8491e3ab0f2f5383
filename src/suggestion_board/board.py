"""
Suggestion synchronization layer.

``SuggestionBoard`` owns the in-memory suggestion list for a session and
keeps it in step with the remote store:

- ``refresh`` replaces the whole list with the server's copy.
- ``create`` and ``add_comment`` wait for the server and raise on failure.
- ``toggle_like`` and ``record_view`` update local state first and push
  to the server in the background. Remote failures are logged and left
  uncorrected; the next ``refresh`` brings back the server's counters.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine, Iterator
from typing import Any

from .config import BoardConfig, DisplayConfig
from .feed import SortOrder, filter_suggestions
from .models import (
    Comment,
    Suggestion,
    SuggestionCategory,
    SuggestionDraft,
    SuggestionType,
    require_category,
    require_type,
)
from .remote import RemoteStore
from .session import SessionState
from .storage import LocalStorage

logger = logging.getLogger(__name__)


class BoardError(Exception):
    """Base class for errors surfaced to board consumers."""


class SuggestionCreateError(BoardError):
    """The remote store rejected a new suggestion."""


class CommentError(BoardError):
    """The remote store rejected a new comment."""


class DraftIncompleteError(BoardError):
    """The saved draft is missing required fields."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Draft is missing: {', '.join(missing)}")


class SuggestionBoard:
    """Canonical client-side state for the suggestion feed."""

    def __init__(
        self,
        store: RemoteStore,
        session: SessionState,
        display: DisplayConfig | None = None,
    ):
        self.store = store
        self.session = session
        self.display = display or DisplayConfig()

        self.suggestions: list[Suggestion] = []
        self.loading = False
        self.syncing = False
        self.last_error: str | None = None

        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: BoardConfig) -> "SuggestionBoard":
        """Wire up storage, session and remote store from configuration."""
        storage = LocalStorage(config.storage.path)
        session = SessionState(storage, config.storage)
        return cls(RemoteStore.from_config(config.remote), session, config.display)

    async def __aenter__(self) -> "SuggestionBoard":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.dispose()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Load session state and fetch the feed."""
        if not self.session.initialized:
            self.session.init()
        await self.refresh()

    async def drain(self) -> None:
        """Wait for all background remote calls to finish."""
        while self._background:
            tasks = list(self._background)
            results = await asyncio.gather(*tasks, return_exceptions=True)
            self._background.difference_update(tasks)
            for result in results:
                if isinstance(result, Exception):
                    logger.error(f"Background sync task failed: {result!r}")

    async def dispose(self) -> None:
        """Finish in-flight work and release session state."""
        await self.drain()
        self.session.dispose()
        self.suggestions = []

    # -------------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------------

    @property
    def visitor_id(self) -> str:
        return self.session.visitor_id

    @property
    def liked_ids(self) -> set[str]:
        return self.session.liked_ids

    @property
    def author(self) -> str:
        """Display name attached to posts and comments from this visitor."""
        return self.display.author_for(self.visitor_id)

    def get(self, suggestion_id: str) -> Suggestion | None:
        for suggestion in self.suggestions:
            if suggestion.id == suggestion_id:
                return suggestion
        return None

    def is_liked(self, suggestion_id: str) -> bool:
        return self.session.has_liked(suggestion_id)

    def feed(
        self,
        category: SuggestionCategory | None = None,
        suggestion_type: SuggestionType | None = None,
        search: str = "",
        sort: SortOrder = SortOrder.RECENT,
    ) -> list[Suggestion]:
        """Filtered, sorted view of the current suggestions."""
        return filter_suggestions(self.suggestions, category, suggestion_type, search, sort)

    def error_hint(self) -> str | None:
        """
        Classify ``last_error`` for setup guidance.

        Returns "schema_cache" when the API has not picked up the table yet,
        "missing_table" when the table itself seems absent, otherwise None.
        """
        if not self.last_error:
            return None
        message = self.last_error.lower()
        if "schema cache" in message:
            return "schema_cache"
        if self.store.table.lower() in message:
            return "missing_table"
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @contextlib.contextmanager
    def _flag(self, name: str) -> Iterator[None]:
        """Hold a busy flag for the duration of a block."""
        setattr(self, name, True)
        try:
            yield
        finally:
            setattr(self, name, False)

    def _spawn(
        self, func: Callable[..., Coroutine[Any, Any, None]], *args: Any
    ) -> asyncio.Task:
        """Run ``func(*args)`` in the background. Raises if no loop is running."""
        loop = asyncio.get_running_loop()
        task = loop.create_task(func(*args))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def refresh(self) -> bool:
        """
        Replace the local list with the server's.

        On failure the current list is kept and ``last_error`` is set.
        Returns True on success.
        """
        with self._flag("loading"):
            self.last_error = None
            result = await self.store.list_suggestions()
            if not result.ok:
                logger.warning(f"Failed to fetch suggestions: {result.error}")
                self.last_error = result.error
                return False
            self.suggestions = list(result.data or [])
            logger.debug(f"Loaded {len(self.suggestions)} suggestion(s)")
            return True

    async def create(
        self,
        title: str,
        problem: str,
        solution: str,
        impact: str,
        category: SuggestionCategory | str,
        suggestion_type: SuggestionType | str,
    ) -> Suggestion:
        """
        Submit a new suggestion.

        The suggestion is added to the front of the list only after the
        server confirms it. Raises ``SuggestionCreateError`` on failure and
        ``ValueError`` for an unknown category or type.
        """
        draft = SuggestionDraft(
            title=title,
            problem=problem,
            solution=solution,
            impact=impact,
            category=require_category(category),
            type=require_type(suggestion_type),
        )
        with self._flag("syncing"):
            result = await self.store.create_suggestion(draft, self.author)
            if not result.ok:
                logger.error(f"Add suggestion failed: {result.error}")
                raise SuggestionCreateError(result.error)
            self.suggestions.insert(0, result.data)
            return result.data

    async def submit_draft(self) -> Suggestion:
        """Create a suggestion from the saved draft, clearing it on success."""
        draft = self.session.load_draft()
        if not draft.is_complete():
            raise DraftIncompleteError(draft.missing_fields())
        suggestion = await self.create(
            draft.title,
            draft.problem,
            draft.solution,
            draft.impact,
            draft.category,
            draft.type,
        )
        self.session.clear_draft()
        return suggestion

    def toggle_like(self, suggestion_id: str) -> asyncio.Task:
        """
        Like or unlike a suggestion.

        Liked state and the local counter change immediately; the remote
        counter update runs in the background and its result is not
        written back. Must be called from a running event loop.
        """
        had_liked = self.session.has_liked(suggestion_id)
        task = self._spawn(self._push_like, suggestion_id, not had_liked)
        self.session.toggle_liked(suggestion_id)

        suggestion = self.get(suggestion_id)
        if suggestion is not None:
            if had_liked:
                suggestion.likes = max(0, suggestion.likes - 1)
            else:
                suggestion.likes += 1

        return task

    async def _push_like(self, suggestion_id: str, increment: bool) -> None:
        result = await self.store.set_like_count(suggestion_id, increment)
        if not result.ok:
            logger.warning(f"Like for {suggestion_id} not saved remotely: {result.error}")

    async def add_comment(self, suggestion_id: str, content: str) -> Comment:
        """
        Post a comment.

        Appended locally only after the server accepts it. Raises
        ``CommentError`` on failure and ``ValueError`` for empty content.
        """
        if not content or not content.strip():
            raise ValueError("Comment content must not be empty")

        with self._flag("syncing"):
            result = await self.store.append_comment(suggestion_id, content, self.author)
            if not result.ok:
                logger.error(f"Add comment failed: {result.error}")
                raise CommentError(result.error)
            suggestion = self.get(suggestion_id)
            if suggestion is not None:
                suggestion.comments.append(result.data)
            return result.data

    def record_view(self, suggestion_id: str) -> asyncio.Task:
        """
        Count a view.

        The local counter always goes up by one; the remote increment is
        best effort. Must be called from a running event loop.
        """
        task = self._spawn(self._push_view, suggestion_id)
        suggestion = self.get(suggestion_id)
        if suggestion is not None:
            suggestion.views += 1
        return task

    async def _push_view(self, suggestion_id: str) -> None:
        result = await self.store.touch_view(suggestion_id)
        if not result.ok:
            logger.debug(f"View for {suggestion_id} not saved remotely: {result.error}")
