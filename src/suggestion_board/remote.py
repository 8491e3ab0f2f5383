"""
Remote store adapter for the hosted ``suggestions`` table.

Speaks the PostgREST dialect used by managed Postgres services
(``/rest/v1/<table>`` with ``apikey`` headers and ``eq.`` filters).

Every operation returns a ``StoreResult`` and never raises; the
synchronization layer decides per operation whether a failure is
surfaced, raised or ignored.

Counter updates are read-modify-write with no compare-and-swap, so
concurrent likes from different visitors race and the last write wins.
"""

import logging
from typing import Any

import httpx

from .config import RemoteStoreConfig
from .models import (
    Comment,
    StoreResult,
    Suggestion,
    SuggestionDraft,
    SuggestionStatus,
    new_comment_id,
    now_ms,
)

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """A response that was well-formed HTTP but not what we asked for."""


def error_message(exc: Exception) -> str:
    """Best human-readable message for a failed request."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {exc.response.status_code}"
    return str(exc) or exc.__class__.__name__


# Failures the adapter converts into StoreResult.failure
STORE_ERRORS = (httpx.HTTPError, RemoteStoreError, ValueError, KeyError, TypeError)


class RemoteStore:
    """Client for the managed data API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        table: str = "suggestions",
        timeout_seconds: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout_seconds

    @classmethod
    def from_config(cls, config: RemoteStoreConfig) -> "RemoteStore":
        return cls(
            base_url=config.base_url,
            api_key=config.get_api_key(),
            table=config.table,
            timeout_seconds=config.timeout_seconds,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _id_filter(self, suggestion_id: str) -> dict[str, str]:
        return {"id": f"eq.{suggestion_id}"}

    async def _fetch_field(
        self, client: httpx.AsyncClient, suggestion_id: str, column: str
    ) -> Any:
        """Read one column of one row."""
        response = await client.get(
            self.endpoint,
            headers=self._headers(),
            params={"select": column, **self._id_filter(suggestion_id)},
        )
        response.raise_for_status()
        rows = response.json()
        if not rows:
            raise RemoteStoreError(f"Suggestion not found: {suggestion_id}")
        return rows[0].get(column)

    async def _update_fields(
        self, client: httpx.AsyncClient, suggestion_id: str, fields: dict[str, Any]
    ) -> None:
        response = await client.patch(
            self.endpoint,
            headers=self._headers(prefer="return=minimal"),
            params=self._id_filter(suggestion_id),
            json=fields,
        )
        response.raise_for_status()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def list_suggestions(self) -> StoreResult[list[Suggestion]]:
        """Fetch every suggestion, newest first."""
        logger.debug(f"Listing {self.table}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    self.endpoint,
                    headers=self._headers(),
                    params={"select": "*", "order": "createdAt.desc"},
                )
                response.raise_for_status()
                rows = response.json() or []
                return StoreResult.success([Suggestion.from_dict(row) for row in rows])
            except STORE_ERRORS as e:
                logger.warning(f"Error listing suggestions: {e}")
                return StoreResult.failure(error_message(e))

    async def create_suggestion(
        self, draft: SuggestionDraft, author: str
    ) -> StoreResult[Suggestion]:
        """Insert a new suggestion and return the stored row."""
        row = {
            **draft.to_dict(),
            "author": author,
            "createdAt": now_ms(),
            "status": SuggestionStatus.PENDING.value,
            "likes": 0,
            "views": 0,
            "comments": [],
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    headers=self._headers(prefer="return=representation"),
                    json=[row],
                )
                response.raise_for_status()
                inserted = response.json()
                if isinstance(inserted, list):
                    if not inserted:
                        raise RemoteStoreError("Insert returned no row")
                    inserted = inserted[0]
                suggestion = Suggestion.from_dict(inserted)
                logger.info(f"Created suggestion {suggestion.id}")
                return StoreResult.success(suggestion)
            except STORE_ERRORS as e:
                logger.error(f"Insert error: {error_message(e)}")
                return StoreResult.failure(error_message(e))

    async def set_like_count(
        self, suggestion_id: str, increment: bool
    ) -> StoreResult[int]:
        """
        Add or remove one like.

        Reads the current count, applies +1 or -1 (never below zero) and
        writes it back.
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                current = await self._fetch_field(client, suggestion_id, "likes")
                current = int(current or 0)
                new_likes = current + 1 if increment else max(0, current - 1)
                await self._update_fields(client, suggestion_id, {"likes": new_likes})
                return StoreResult.success(new_likes)
            except STORE_ERRORS as e:
                logger.warning(f"Error updating likes for {suggestion_id}: {e}")
                return StoreResult.failure(error_message(e))

    async def append_comment(
        self, suggestion_id: str, content: str, author: str
    ) -> StoreResult[Comment]:
        """Append a comment to a suggestion's embedded comment list."""
        comment = Comment.create(content, author)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                existing = await self._fetch_field(client, suggestion_id, "comments")
                taken = {c.get("id") for c in existing or [] if isinstance(c, dict)}
                while comment.id in taken:
                    comment.id = new_comment_id()
                updated = [*(existing or []), comment.to_dict()]
                await self._update_fields(client, suggestion_id, {"comments": updated})
                return StoreResult.success(comment)
            except STORE_ERRORS as e:
                logger.error(f"Error adding comment to {suggestion_id}: {e}")
                return StoreResult.failure(error_message(e))

    async def touch_view(self, suggestion_id: str) -> StoreResult[None]:
        """Best-effort view counter increment."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                views = await self._fetch_field(client, suggestion_id, "views")
                await self._update_fields(
                    client, suggestion_id, {"views": int(views or 0) + 1}
                )
                return StoreResult.success()
            except STORE_ERRORS as e:
                logger.debug(f"Silent view increment fail for {suggestion_id}: {e}")
                return StoreResult.failure(error_message(e))
