# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Durable client storage for the credential token.

The credential token is the only artifact persisted between runs. It is
stored under a well-known key in a small JSON document so that other
client preferences can live beside it.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "authToken"


class TokenStore(ABC):
    """Persisted credential token storage."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or None if absent."""
        ...

    @abstractmethod
    def save(self, token: str) -> None:
        """Persist the token, replacing any previous one."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored token. Safe to call when nothing is stored."""
        ...


class MemoryTokenStore(TokenStore):
    """Process-local token store, used by tests and ephemeral shells."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Token store backed by a JSON file.

    Writes go through a temporary file and an atomic replace. An
    unreadable or corrupt file is treated as empty.

    Attributes:
        path: Location of the JSON document.
        key: Key holding the token.
    """

    def __init__(self, path: Path | str, key: str = DEFAULT_STORAGE_KEY) -> None:
        """Initialize the file token store.

        Args:
            path: Location of the JSON document.
            key: Key holding the token.
        """
        self.path = Path(path)
        self.key = key

    def load(self) -> str | None:
        token = self._read().get(self.key)
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        data = self._read()
        data[self.key] = token
        self._write(data)
        logger.debug("Credential token persisted to %s", self.path)

    def clear(self) -> None:
        data = self._read()
        if self.key not in data:
            return
        del data[self.key]
        self._write(data)
        logger.debug("Credential token removed from %s", self.path)

    def _read(self) -> dict:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Could not read client storage %s: %s", self.path, str(e))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Client storage %s is corrupt, ignoring it", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp_path, self.path)
