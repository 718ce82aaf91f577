"""Durable key/value storage used to persist client state between runs.

Values are strings (callers serialize to JSON themselves), mirroring the
browser local-storage contract the storefront was designed around.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class AbstractStorage(ABC):
    """Interface for durable string storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; no-op when absent."""
        raise NotImplementedError


class InMemoryStorage(AbstractStorage):
    """Process-local storage, mostly for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStorage(AbstractStorage):
    """Storage backed by one JSON object on disk.

    The whole file is rewritten atomically (temp file + rename) on every
    change. A missing, unreadable or malformed file is treated as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("storage.read_failed", extra={"path": str(self.path), "error": str(exc)})
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("storage.corrupted_file", extra={"path": str(self.path)})
            return {}

        if not isinstance(data, dict):
            logger.warning("storage.corrupted_file", extra={"path": str(self.path)})
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush_locked(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            if self._data.get(key) == value:
                return
            self._data[key] = value
            self._flush_locked()

    def remove(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            del self._data[key]
            self._flush_locked()
