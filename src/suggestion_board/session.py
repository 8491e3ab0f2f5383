"""
Per-device session state: visitor id, liked suggestions and the draft.

One ``SessionState`` exists per running client. It is constructed
explicitly, initialised with ``init()`` and released with ``dispose()``.
Every mutation is written through to local storage immediately so a
restart reconstructs identity and liked state.
"""

import logging
import random

from .config import StorageConfig
from .models import SuggestionDraft
from .storage import LocalStorage

logger = logging.getLogger(__name__)


def generate_visitor_id() -> str:
    """A random 4-digit display tag (1000-9999). Not a credential."""
    return str(random.randint(1000, 9999))


def _is_valid_visitor_id(value: object) -> bool:
    return isinstance(value, str) and len(value) == 4 and value.isdigit()


class SessionState:
    """Locally persisted client identity and preferences."""

    def __init__(self, storage: LocalStorage, config: StorageConfig | None = None):
        self.storage = storage
        self.config = config or StorageConfig()
        self.visitor_id: str = ""
        self.liked_ids: set[str] = set()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Load visitor id and liked ids, generating a visitor id if needed."""
        visitor_id = self.storage.get_item(self.config.visitor_id_key)
        if not _is_valid_visitor_id(visitor_id):
            if visitor_id is not None:
                logger.warning(f"Discarding malformed visitor id {visitor_id!r}")
            visitor_id = generate_visitor_id()
            self.storage.set_item(self.config.visitor_id_key, visitor_id)
            logger.info(f"Generated new visitor id {visitor_id}")
        self.visitor_id = visitor_id

        saved = self.storage.get_json(self.config.liked_ids_key)
        if isinstance(saved, list):
            self.liked_ids = {str(i) for i in saved}
        else:
            if saved is not None:
                logger.warning("Liked ids entry is not a list, ignoring it")
            self.liked_ids = set()

        self._initialized = True
        logger.debug(
            f"Session ready for visitor {self.visitor_id} "
            f"({len(self.liked_ids)} liked)"
        )

    def dispose(self) -> None:
        """Release in-memory state. Persisted values are left in place."""
        self.visitor_id = ""
        self.liked_ids = set()
        self._initialized = False

    # -------------------------------------------------------------------------
    # Likes
    # -------------------------------------------------------------------------

    def has_liked(self, suggestion_id: str) -> bool:
        return suggestion_id in self.liked_ids

    def toggle_liked(self, suggestion_id: str) -> bool:
        """
        Flip like membership for a suggestion and persist it.

        Returns True if the suggestion is now liked.
        """
        if suggestion_id in self.liked_ids:
            self.liked_ids.discard(suggestion_id)
            now_liked = False
        else:
            self.liked_ids.add(suggestion_id)
            now_liked = True
        self._save_liked_ids()
        return now_liked

    def _save_liked_ids(self) -> None:
        self.storage.set_json(self.config.liked_ids_key, sorted(self.liked_ids))

    # -------------------------------------------------------------------------
    # Draft
    # -------------------------------------------------------------------------

    def load_draft(self) -> SuggestionDraft:
        """Return the saved draft, or an empty one."""
        data = self.storage.get_json(self.config.draft_key)
        if isinstance(data, dict):
            return SuggestionDraft.from_dict(data)
        return SuggestionDraft()

    def has_draft(self) -> bool:
        return isinstance(self.storage.get_json(self.config.draft_key), dict)

    def save_draft(self, draft: SuggestionDraft) -> None:
        self.storage.set_json(self.config.draft_key, draft.to_dict())

    def update_draft(self, **fields) -> SuggestionDraft:
        """Apply field changes to the saved draft and persist the result."""
        data = self.load_draft().to_dict()
        for name, value in fields.items():
            if name not in data:
                raise ValueError(f"Unknown draft field: {name}")
            if value is not None:
                data[name] = value
        draft = SuggestionDraft.from_dict(data)
        self.save_draft(draft)
        return draft

    def clear_draft(self) -> None:
        self.storage.remove_item(self.config.draft_key)
