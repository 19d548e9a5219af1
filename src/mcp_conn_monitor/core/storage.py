"""Durable key-value storage for JSON-serializable values.

Reads of a missing or corrupt key return the caller's default. Write failures
are logged and swallowed: in-memory state stays authoritative for the session.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(Protocol):
    """Storage interface keyed by fixed string keys."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> bool:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Volatile store. Values are JSON round-tripped so callers never share state with it."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to store %s: %s", key, e)
            return False
        return True

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """One ``<key>.json`` file per key under a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return default
        except OSError as e:
            logger.warning("Failed to read %s: %s", key, e)
            return default

        try:
            return json.loads(text)
        except ValueError as e:
            logger.warning("Ignoring corrupt value for %s: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        path = self._path(key)
        try:
            payload = json.dumps(value)
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to persist %s: %s", key, e)
            return False
        return True

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove %s: %s", key, e)
