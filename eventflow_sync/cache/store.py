"""
Key-value stores backing the on-device cache.

Both stores are synchronous: a cache read or write never suspends the
event loop for network I/O.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from ..exceptions import StorageIOError, StorageQuotaError


class KeyValueStore(ABC):
    """String key to string value persistence."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is missing.

        Raises:
            StorageIOError: If the value cannot be read
        """
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Raises:
            StorageIOError: If the write fails
            StorageQuotaError: If the store is full
        """
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        ...


class MemoryKeyValueStore(KeyValueStore):
    """In-process store with an optional byte quota.

    The quota is counted over the UTF-8 size of all values, like the
    per-origin limit of browser local storage.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            size = used + len(value.encode("utf-8"))
            if size > self.max_bytes:
                raise StorageQuotaError(key, size, self.max_bytes)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class FileKeyValueStore(KeyValueStore):
    """One file per key under a base directory.

    Directory structure:
    {base_path}/
      eventflow_users.json
      eventflow_events.json

    Writes go to a temp file in the same directory and are renamed into
    place, so a crash never leaves a half-written value behind.
    """

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path).expanduser()

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageIOError("resolve_key", key)
        return self.base_path / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageIOError("read", str(path), e) from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("create_directory", str(self.base_path), e) from e

        fd, temp_path = tempfile.mkstemp(dir=self.base_path, prefix=".tmp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except OSError as e:
            try:
                os.remove(temp_path)
            except OSError:
                pass
            raise StorageIOError("write", str(path), e) from e

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageIOError("remove", str(path), e) from e

    def clear(self) -> None:
        if not self.base_path.exists():
            return
        for path in self.base_path.glob("*.json"):
            try:
                path.unlink()
            except OSError as e:
                raise StorageIOError("clear", str(path), e) from e
