"""
Configuration for suggestion-board.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class RemoteStoreConfig:
    """Managed data API connection configuration."""

    base_url: str = "http://127.0.0.1:54321"
    table: str = "suggestions"
    api_key: str | None = None
    api_key_env: str | None = "SUGGESTION_BOARD_API_KEY"
    timeout_seconds: float = 10.0

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class StorageConfig:
    """Local durable storage for session state."""

    path: Path = field(default_factory=lambda: Path("suggestion_board_session.db"))
    visitor_id_key: str = "ramat_gan_visitor_id"
    liked_ids_key: str = "ramat_gan_user_liked_ids_v3"
    draft_key: str = "suggestion_pitch_v6"


@dataclass
class DisplayConfig:
    """How visitor attribution is rendered."""

    author_label: str = "סטודנט"
    author_template: str = "{label} #{visitor_id}"

    def author_for(self, visitor_id: str) -> str:
        """Build the display author string for a visitor."""
        return self.author_template.format(label=self.author_label, visitor_id=visitor_id)


@dataclass
class BoardConfig:
    """Complete suggestion-board configuration."""

    remote: RemoteStoreConfig = field(default_factory=RemoteStoreConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoardConfig":
        """Create config from a dictionary (e.g., from YAML)."""
        config = cls()

        if "remote" in data:
            remote = data["remote"]
            config.remote = RemoteStoreConfig(
                base_url=remote.get("base_url", config.remote.base_url),
                table=remote.get("table", "suggestions"),
                api_key=remote.get("api_key"),
                api_key_env=remote.get("api_key_env", config.remote.api_key_env),
                timeout_seconds=remote.get("timeout_seconds", 10.0),
            )

        if "storage" in data:
            storage = data["storage"]
            config.storage = StorageConfig(
                path=Path(storage.get("path", config.storage.path)),
                visitor_id_key=storage.get("visitor_id_key", config.storage.visitor_id_key),
                liked_ids_key=storage.get("liked_ids_key", config.storage.liked_ids_key),
                draft_key=storage.get("draft_key", config.storage.draft_key),
            )

        if "display" in data:
            display = data["display"]
            config.display = DisplayConfig(
                author_label=display.get("author_label", config.display.author_label),
                author_template=display.get(
                    "author_template", config.display.author_template
                ),
            )

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "BoardConfig":
        """Load config from a YAML file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        # Accept either a bare config or one nested under "suggestion_board"
        return cls.from_dict(data.get("suggestion_board", data))

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, leaving out secrets."""
        return {
            "remote": {
                "base_url": self.remote.base_url,
                "table": self.remote.table,
                "api_key_env": self.remote.api_key_env,
                "timeout_seconds": self.remote.timeout_seconds,
            },
            "storage": {
                "path": str(self.storage.path),
                "visitor_id_key": self.storage.visitor_id_key,
                "liked_ids_key": self.storage.liked_ids_key,
                "draft_key": self.storage.draft_key,
            },
            "display": {
                "author_label": self.display.author_label,
                "author_template": self.display.author_template,
            },
        }
