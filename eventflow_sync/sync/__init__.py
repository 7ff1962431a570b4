"""
Synchronization module.

Provides the Synchronizer (read fallback chain and write failover), the
snapshot sources that make up the read chain, and the change notifier.
"""

from .notifier import ChangeNotifier, NoopChangeNotifier, Unsubscribe
from .sources import (
    BootstrapSource,
    CacheSource,
    PrimarySource,
    SecondarySource,
    SnapshotSource,
)
from .synchronizer import Synchronizer
from .types import Snapshot, StorageTier, WriteResult

__all__ = [
    "Synchronizer",
    "Snapshot",
    "StorageTier",
    "WriteResult",
    "SnapshotSource",
    "PrimarySource",
    "SecondarySource",
    "CacheSource",
    "BootstrapSource",
    "ChangeNotifier",
    "NoopChangeNotifier",
    "Unsubscribe",
]
