"""
Snapshot sources for the read path.

Each source wraps one tier and returns a Snapshot, or None when the tier
has nothing usable. The synchronizer tries them in order and stops at
the first Snapshot. Remote sources report failures by raising; the
synchronizer logs the error and moves to the next source.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Any, TypeVar

from ..cache import LocalCache
from ..config import (
    DEFAULT_SECONDARY_TIMEOUT,
    EVENTS_COLLECTION,
    LOCAL_EVENTS_KEY,
    LOCAL_USERS_KEY,
    USERS_COLLECTION,
)
from ..exceptions import StorageConnectionError, SyncStorageError
from ..logging_utils import get_sync_logger
from ..models import (
    EventRecord,
    bootstrap_users,
    events_from_records,
    records_from_value,
    users_from_records,
)
from ..remote import PrimaryConnection, SecondaryStore
from .types import Snapshot, StorageTier

logger = get_sync_logger("sources")

T = TypeVar("T")


class SnapshotSource(ABC):
    """One tier of the read fallback chain."""

    tier: StorageTier

    # Remote tiers refresh the cache with what they return
    write_back: bool = False

    @abstractmethod
    async def load(self) -> Snapshot | None:
        """Return a usable snapshot, or None to fall through.

        Raises:
            Exception: Any failure; the caller logs it and falls through
        """
        ...

    @property
    def _log_context(self) -> dict[str, str]:
        return {"tier": self.tier.value}


class PrimarySource(SnapshotSource):
    """Reads both collections from the primary store."""

    tier = StorageTier.PRIMARY
    write_back = True

    def __init__(self, connection: PrimaryConnection, timeout: float | None = None) -> None:
        self.connection = connection
        self.timeout = timeout

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        if self.timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def load(self) -> Snapshot | None:
        if not self.connection.is_ready:
            logger.warning(f"Primary store is {self.connection.state.value}, skipping")
            return None

        store = self.connection.store
        # Both reads settle before the tier is judged
        results = await self._bounded(
            asyncio.gather(
                store.get(USERS_COLLECTION),
                store.get(EVENTS_COLLECTION),
                return_exceptions=True,
            )
        )

        failures = [r for r in results if isinstance(r, Exception)]
        if failures:
            raise failures[0]

        users_snapshot, events_snapshot = results
        users = users_from_records(records_from_value(users_snapshot.value))
        events = events_from_records(records_from_value(events_snapshot.value))

        logger.info(
            f"Loaded from primary store: users={len(users)} events={len(events)}",
            extra=self._log_context,
        )
        if not users and not events:
            return None
        return Snapshot(users=users, events=events, source=self.tier)


class SecondarySource(SnapshotSource):
    """Reads both collections from the REST backend under a hard timeout."""

    tier = StorageTier.SECONDARY
    write_back = True

    def __init__(
        self,
        store: SecondaryStore | None,
        timeout: float = DEFAULT_SECONDARY_TIMEOUT,
    ) -> None:
        self.store = store
        self.timeout = timeout

    async def load(self) -> Snapshot | None:
        if self.store is None:
            return None

        try:
            results = await asyncio.wait_for(
                asyncio.gather(
                    self.store.fetch_collection(USERS_COLLECTION),
                    self.store.fetch_collection(EVENTS_COLLECTION),
                    return_exceptions=True,
                ),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            raise StorageConnectionError(
                "secondary", TimeoutError(f"no response within {self.timeout}s")
            ) from e

        failures = [r for r in results if isinstance(r, Exception)]
        if failures:
            raise failures[0]

        users_body: list[Any] = results[0]  # type: ignore[assignment]
        events_body: list[Any] = results[1]  # type: ignore[assignment]

        users = users_from_records(users_body)
        events = events_from_records(events_body)

        logger.info(
            f"Loaded from REST backend: users={len(users)} events={len(events)}",
            extra=self._log_context,
        )
        if not users and not events:
            return None
        return Snapshot(users=users, events=events, source=self.tier)


def _cached_events(cache: LocalCache) -> list[EventRecord]:
    """Cached events; unreadable entries count as no events."""
    try:
        return events_from_records(cache.read_collection(LOCAL_EVENTS_KEY))
    except SyncStorageError as e:
        logger.warning(f"Ignoring unreadable cached events: {e}")
        return []


class CacheSource(SnapshotSource):
    """Last cached collections, used when they contain users."""

    tier = StorageTier.CACHE

    def __init__(self, cache: LocalCache) -> None:
        self.cache = cache

    async def load(self) -> Snapshot | None:
        users = users_from_records(self.cache.read_collection(LOCAL_USERS_KEY))
        if not users:
            return None
        events = _cached_events(self.cache)
        logger.info(
            f"Using cached data: users={len(users)} events={len(events)}",
            extra=self._log_context,
        )
        return Snapshot(users=users, events=events, source=self.tier)


class BootstrapSource(SnapshotSource):
    """Seed users plus whatever events are cached. Always succeeds.

    The seed users are written to the cache so the next cold read finds
    them there.
    """

    tier = StorageTier.BOOTSTRAP

    def __init__(self, cache: LocalCache) -> None:
        self.cache = cache

    async def load(self) -> Snapshot | None:
        users = bootstrap_users()
        self.cache.write_collection(LOCAL_USERS_KEY, [user.to_dict() for user in users])
        events = _cached_events(self.cache)

        logger.info(
            f"Using bootstrap users: users={len(users)} events={len(events)}",
            extra=self._log_context,
        )
        return Snapshot(users=users, events=events, source=self.tier)
