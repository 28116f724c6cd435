"""
Credential persistence.

The organization URL and access token are stored under two fixed keys in a
key-value store. Storage is the source of truth across restarts.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from azdo_panel.logging import get_logger
from azdo_panel.types import Credentials

logger = get_logger("credentials")

ORGANIZATION_URL_KEY = "azure_devops.organization_url"
ACCESS_TOKEN_KEY = "azure_devops.access_token"


class KeyValueStore(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, for tests and embedding hosts with their own persistence."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    Store backed by a JSON object on disk.

    Every write replaces the file atomically. An unreadable or corrupt file
    reads as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Could not read %s: %s", self.path, e)
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt store %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: expected a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class CredentialStore:
    """Saves, restores and clears the organization URL / access token pair."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def save(self, credentials: Credentials) -> None:
        self.store.set(ORGANIZATION_URL_KEY, credentials.organization_url)
        self.store.set(ACCESS_TOKEN_KEY, credentials.access_token)
        logger.debug("Saved credentials for %s", credentials.organization_url)

    def load(self) -> Credentials | None:
        """Return the stored credentials, or None unless both fields are non-empty."""
        organization_url = self.store.get(ORGANIZATION_URL_KEY)
        access_token = self.store.get(ACCESS_TOKEN_KEY)
        if not organization_url or not access_token:
            return None
        return Credentials(organization_url=organization_url, access_token=access_token)

    def clear(self) -> None:
        self.store.delete(ORGANIZATION_URL_KEY)
        self.store.delete(ACCESS_TOKEN_KEY)
        logger.debug("Cleared stored credentials")
