"""
Local durable key-value storage.

Holds the small pieces of client state that must survive a restart
(visitor id, liked ids, draft). Values are stored as strings; callers
encode structured values as JSON.
"""

import json
import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_ts TEXT NOT NULL
)
"""


class LocalStorage:
    """SQLite-backed string key-value store."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def get_item(self, key: str) -> str | None:
        """Get a stored value, or None if absent."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?",
                (key,),
            )
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        now = datetime.now(UTC).isoformat()
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO local_storage (key, value, updated_ts)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_ts = excluded.updated_ts
                """,
                (key, value, now),
            )
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        """Delete a value. Missing keys are ignored."""
        conn = self._connect()
        try:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # JSON helpers
    # -------------------------------------------------------------------------

    def get_json(self, key: str) -> Any | None:
        """
        Get a JSON-encoded value.

        A corrupt entry is treated as absent rather than as an error.
        """
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt local storage entry {key!r}")
            return None

    def set_json(self, key: str, value: Any) -> None:
        """Store a value as JSON."""
        self.set_item(key, json.dumps(value, ensure_ascii=False))
