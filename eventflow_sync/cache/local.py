"""
On-device cache of record collections.

Holds the last-known-good copy of each collection as a JSON array under
a stable key. Reads never fail and writes never raise: a broken cache
degrades to an empty one.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..exceptions import SyncStorageError
from ..logging_utils import get_sync_logger
from .store import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

logger = get_sync_logger("cache")


class LocalCache:
    """JSON collection cache over a key-value store.

    Example:
        >>> cache = LocalCache.in_memory()
        >>> cache.write_collection("eventflow_users", [{"id": "1"}])
        >>> cache.read_collection("eventflow_users")
        [{'id': '1'}]
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @classmethod
    def on_disk(cls, base_path: Path | str) -> LocalCache:
        return cls(FileKeyValueStore(base_path))

    @classmethod
    def in_memory(cls, max_bytes: int | None = None) -> LocalCache:
        return cls(MemoryKeyValueStore(max_bytes=max_bytes))

    def read_collection(self, key: str) -> list[dict[str, Any]]:
        """Read a cached collection.

        Returns an empty list when the key is missing or the stored value
        is unreadable, unparseable or not an array.
        """
        try:
            stored = self.store.get(key)
        except SyncStorageError as e:
            logger.warning(f"Failed to read {key} from local cache: {e}")
            return []

        if not stored:
            return []

        try:
            value = json.loads(stored)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt local cache entry {key}, treating as empty: {e}")
            return []

        if not isinstance(value, list):
            logger.warning(
                f"Local cache entry {key} is {type(value).__name__}, not a list; treating as empty"
            )
            return []

        return value

    def write_collection(self, key: str, records: Sequence[Any]) -> None:
        """Replace a cached collection.

        Failures (quota exceeded, I/O errors, unserializable records) are
        logged and swallowed.
        """
        try:
            payload = json.dumps(list(records))
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to serialize {key} for local cache: {e}")
            return

        try:
            self.store.set(key, payload)
        except SyncStorageError as e:
            logger.warning(f"Failed to save {key} to local cache: {e}")
            return

        logger.debug(f"Saved {len(records)} records to local cache under {key}")

    def clear(self, key: str) -> None:
        """Drop a cached collection."""
        try:
            self.store.remove(key)
        except SyncStorageError as e:
            logger.warning(f"Failed to clear {key} from local cache: {e}")
