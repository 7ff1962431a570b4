"""
Eventflow Sync

Client-side synchronization of users and event records across a
realtime database, a REST backend and an on-device cache.

Provides:
- Ordered read fallback (primary -> REST backend -> cache -> bootstrap users)
- Write failover (cache first, then primary, then REST backend)
- Per-write outcome reporting without ever failing the caller
- A change-notifier seam for live updates

Usage:

    >>> from eventflow_sync import Synchronizer, SyncConfig
    >>> async with Synchronizer.from_config(SyncConfig.from_environment()) as sync:
    ...     snapshot = await sync.fetch_initial_data()
    ...     print(snapshot.source, len(snapshot.users))
    ...     await sync.persist_events(snapshot.events)
"""

from .cache import FileKeyValueStore, KeyValueStore, LocalCache, MemoryKeyValueStore
from .config import PrimaryConfig, SyncConfig
from .exceptions import (
    AuthenticationError,
    MalformedResponseError,
    RemoteResponseError,
    StorageConnectionError,
    StorageIOError,
    StorageQuotaError,
    SyncStorageError,
    ValidationError,
)
from .models import EventRecord, User, UserRole, bootstrap_users
from .remote import (
    ConnectionState,
    PrimaryConnection,
    RealtimeDatabaseClient,
    RestBackendClient,
)
from .sync import (
    ChangeNotifier,
    NoopChangeNotifier,
    Snapshot,
    StorageTier,
    Synchronizer,
    WriteResult,
)

__all__ = [
    # Core
    "Synchronizer",
    "Snapshot",
    "StorageTier",
    "WriteResult",
    "ChangeNotifier",
    "NoopChangeNotifier",
    # Configuration
    "SyncConfig",
    "PrimaryConfig",
    # Stores
    "LocalCache",
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "PrimaryConnection",
    "ConnectionState",
    "RealtimeDatabaseClient",
    "RestBackendClient",
    # Records
    "User",
    "UserRole",
    "EventRecord",
    "bootstrap_users",
    # Exceptions
    "SyncStorageError",
    "StorageIOError",
    "StorageQuotaError",
    "StorageConnectionError",
    "AuthenticationError",
    "RemoteResponseError",
    "MalformedResponseError",
    "ValidationError",
]

__version__ = "0.1.0"
