"""
NexusForge Kernel — Persistence

Durable storage of named top-level collections (users, projects, tickets,
logs, flags, images) on a string key-value store, plus a separate, more
volatile store holding the identity of the active session.

Values are stored as JSON text. JSON does not describe its own types, so
on load every field named exactly `createdAt` or `timestamp` is turned
back into a datetime. Time-valued fields under any other name come back
as strings.

Writes are best-effort: a failed save is logged and the in-memory state
stays authoritative for the session.
"""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from forge.kernel.types import DATE_FIELDS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key layout
# ---------------------------------------------------------------------------

USERS_KEY = "nexusforge_users"
PROJECTS_KEY = "nexusforge_projects"
BANNED_IPS_KEY = "nexusforge_banned_ips"
TICKETS_KEY = "nexusforge_tickets"
LOGS_KEY = "nexusforge_logs"
FEATURE_FLAGS_KEY = "nexusforge_features"
MAINTENANCE_FLAGS_KEY = "nexusforge_maintenance"
ANNOUNCEMENT_KEY = "nexusforge_announcement"
CUSTOM_IMAGES_KEY = "nexusforge_custom_images"
CUSTOM_TEMPLATES_KEY = "nexusforge_custom_templates"

SESSION_KEY = "nexusforge_session"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------


class KeyValueStore:
    """
    Abstract string key-value store.
    Implement with files for real use, or in-memory for tests.
    """

    def get(self, key: str) -> str | None:
        """Fetch the raw text stored under key. Returns None if absent."""
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        """Write raw text under key, replacing any previous value."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-memory store for testing and for session identity."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """One `<key>.json` file per key under a directory."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# (De)serialisation
# ---------------------------------------------------------------------------


def dumps(value: Any) -> str:
    """Serialise a collection. Datetimes become ISO 8601 strings."""
    return json.dumps(value, default=_encode_default, ensure_ascii=False)


def loads(text: str) -> Any:
    """Parse a collection, rebuilding `createdAt` / `timestamp` fields as datetimes."""
    return json.loads(text, object_hook=_revive_dates)


def _encode_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _revive_dates(obj: dict[str, Any]) -> dict[str, Any]:
    for key in DATE_FIELDS:
        raw = obj.get(key)
        if isinstance(raw, str):
            try:
                obj[key] = datetime.fromisoformat(raw)
            except ValueError:
                logger.warning("Unparseable %s value %r left as text", key, raw)
    return obj


# ---------------------------------------------------------------------------
# Persistence adapter
# ---------------------------------------------------------------------------


class Persistence:
    """Typed load/save over a KeyValueStore."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self, key: str, default: Any) -> Any:
        """
        Return the value stored under key.
        Falls back to default when the key is absent or cannot be parsed.
        """
        try:
            raw = self.store.get(key)
        except OSError:
            logger.exception("Error reading storage key %r", key)
            return default
        if raw is None:
            return default
        try:
            return loads(raw)
        except ValueError:
            logger.error("Error parsing storage key %r, using default", key)
            return default

    def save(self, key: str, value: Any) -> bool:
        """
        Serialise and write value under key.
        Never raises: failures are logged and False is returned.
        """
        try:
            self.store.set(key, dumps(value))
        except (OSError, TypeError, ValueError):
            logger.exception("Error writing storage key %r", key)
            return False
        return True


class SessionStore:
    """
    Identity of the logged-in user. Lives in its own store so that
    clearing it (logout) leaves the durable collections alone.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._persistence = Persistence(store)

    def get(self) -> dict[str, Any] | None:
        return self._persistence.load(SESSION_KEY, None)

    def set(self, user: dict[str, Any]) -> None:
        self._persistence.save(SESSION_KEY, user)

    def clear(self) -> None:
        try:
            self._persistence.store.delete(SESSION_KEY)
        except OSError:
            logger.exception("Error clearing session")
