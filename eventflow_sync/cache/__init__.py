"""
On-device cache.

Provides the collection cache used as the last-resort read tier and the
synchronous key-value stores behind it.

Example:
    >>> from eventflow_sync.cache import LocalCache
    >>> cache = LocalCache.on_disk("~/.eventflow/cache")
"""

from .local import LocalCache
from .store import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "LocalCache",
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
]
