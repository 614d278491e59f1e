"""Persistence of the VirusTotal API key."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from url_check.constants import API_KEY_STORAGE_KEY, SETTINGS_FILE
from url_check.errors import StorageError

__all__ = ["CredentialStore", "JsonCredentialStore"]

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Storage port shared by both presenters."""

    def get(self) -> Optional[str]:
        """Return the stored API key, or None if it was never set."""
        ...

    def set(self, value: str) -> None:
        """Persist the API key, raising `StorageError` on failure."""
        ...


class JsonCredentialStore:
    """Keep the API key in a small JSON settings file.

    The file holds a single object; keys other than the API key are left
    untouched on write.
    """

    def __init__(self, path: Path = SETTINGS_FILE, key: str = API_KEY_STORAGE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _load(self) -> Dict[str, Any]:
        """Read the settings object, or {} when the file does not exist."""
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read settings file %s: %s", self.path, exc)
            raise StorageError(f"Could not read {self.path}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Unexpected content in {self.path}")
        return raw

    def get(self) -> Optional[str]:
        """Return the stored key; raise `StorageError` if the file is unreadable."""
        value = self._load().get(self.key)
        if value is None:
            return None
        return str(value)

    def set(self, value: str) -> None:
        """Persist `value`, replacing the file only once it is fully written.

        An unreadable settings file is replaced by one holding only the key.
        """
        try:
            data = self._load()
        except StorageError:
            logger.warning("Discarding unreadable settings file %s", self.path)
            data = {}
        data[self.key] = value
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=".settings-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            logger.warning("Could not write settings file %s: %s", self.path, exc)
            raise StorageError(f"Could not write {self.path}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.info("Stored API key in %s", self.path)
