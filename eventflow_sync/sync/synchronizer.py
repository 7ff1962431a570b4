"""
Synchronizer across the primary store, the REST backend and the local cache.

Read path: an ordered chain of snapshot sources (primary, REST backend,
cache, bootstrap defaults); the first usable snapshot wins and remote
results refresh the cache.

Write path: the local cache is written first, then the primary store,
then the REST backend if the primary is unavailable or fails. Remote
failures are logged and reported through WriteResult, never raised.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from ..cache import LocalCache
from ..config import (
    CACHE_KEYS,
    DEFAULT_SECONDARY_TIMEOUT,
    EVENTS_COLLECTION,
    USERS_COLLECTION,
    SyncConfig,
)
from ..logging_utils import get_sync_logger
from ..models import EventRecord, User, bootstrap_users, index_by_id
from ..remote import PrimaryConnection, RestBackendClient, SecondaryStore
from .notifier import ChangeCallback, ChangeNotifier, NoopChangeNotifier, Unsubscribe
from .sources import (
    BootstrapSource,
    CacheSource,
    PrimarySource,
    SecondarySource,
    SnapshotSource,
)
from .types import Snapshot, StorageTier, WriteResult

logger = get_sync_logger("synchronizer")


def _jsonable(updates: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v.value if isinstance(v, Enum) else v for k, v in updates.items()}


class Synchronizer:
    """Reconciles users and events across the storage tiers.

    Every public read and write resolves successfully. Callers that need
    to know where data came from read ``Snapshot.source``; callers that
    need to know whether a write reached a remote store check
    ``last_write_result()`` or pass ``on_write_result``.

    Example:
        >>> async with Synchronizer.from_config(SyncConfig.from_environment()) as sync:
        ...     snapshot = await sync.fetch_initial_data()
        ...     await sync.persist_users(snapshot.users)
    """

    def __init__(
        self,
        cache: LocalCache,
        primary: PrimaryConnection | None = None,
        secondary: SecondaryStore | None = None,
        notifier: ChangeNotifier | None = None,
        secondary_timeout: float = DEFAULT_SECONDARY_TIMEOUT,
        primary_read_timeout: float | None = None,
        on_write_result: Callable[[WriteResult], None] | None = None,
        sources: Sequence[SnapshotSource] | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            cache: Local cache (the synchronizer is its only writer)
            primary: Primary store connection; not configured if omitted
            secondary: REST backend; skipped if omitted
            notifier: Change notifier; live updates disabled if omitted
            secondary_timeout: Hard bound on REST reads, in seconds
            primary_read_timeout: Optional bound on primary reads (None: unbounded)
            on_write_result: Callback receiving the outcome of every write
            sources: Custom read chain replacing the default four tiers
        """
        self.cache = cache
        self.primary = primary or PrimaryConnection.not_configured()
        self.secondary = secondary
        self.notifier = notifier or NoopChangeNotifier()
        self.on_write_result = on_write_result

        if sources is not None:
            self._sources = list(sources)
        else:
            self._sources = [
                PrimarySource(self.primary, timeout=primary_read_timeout),
                SecondarySource(self.secondary, timeout=secondary_timeout),
                CacheSource(self.cache),
                BootstrapSource(self.cache),
            ]

        self._last_write_results: dict[str, WriteResult] = {}
        self._started = False

    @classmethod
    def from_config(cls, config: SyncConfig, **kwargs: Any) -> Synchronizer:
        """Build a synchronizer with the stores described by a config."""
        return cls(
            cache=LocalCache.on_disk(config.resolved_cache_path()),
            primary=PrimaryConnection.from_config(config.primary),
            secondary=RestBackendClient(config.api_base),
            secondary_timeout=config.secondary_timeout,
            primary_read_timeout=config.primary_read_timeout,
            **kwargs,
        )

    @property
    def sources(self) -> list[SnapshotSource]:
        return list(self._sources)

    @property
    def supports_live_updates(self) -> bool:
        return self.notifier.supports_live_updates

    async def start(self) -> None:
        """Open remote connections. Failures leave the tier unavailable.

        Reads and writes call this on first use, so an explicit call is
        only needed to connect ahead of time.
        """
        self._started = True
        await self.primary.open()
        if self.secondary is not None:
            try:
                await self.secondary.initialize()
            except Exception as e:
                logger.warning(f"REST backend client failed to initialize: {e}")

    async def close(self) -> None:
        self._started = False
        await self.primary.close()
        if self.secondary is not None:
            await self.secondary.close()

    async def _ensure_started(self) -> None:
        if not self._started:
            await self.start()

    async def __aenter__(self) -> Synchronizer:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # Read path

    async def fetch_initial_data(self) -> Snapshot:
        """Load users and events from the highest-priority usable tier.

        Never raises. Tiers are tried one after the other; a snapshot from
        a remote tier replaces both cached collections.
        """
        await self._ensure_started()

        for source in self._sources:
            tier = source.tier.value
            try:
                snapshot = await source.load()
            except Exception as e:
                logger.warning(f"Failed to load from {tier}: {e}", extra={"tier": tier})
                continue

            if snapshot is None:
                logger.debug(f"No usable data in {tier}", extra={"tier": tier})
                continue

            if source.write_back:
                self._cache_snapshot(snapshot)

            self.notifier.publish(USERS_COLLECTION, snapshot.users)
            self.notifier.publish(EVENTS_COLLECTION, snapshot.events)
            return snapshot

        logger.warning("No source produced data, using bootstrap users")
        return Snapshot(users=bootstrap_users(), source=StorageTier.BOOTSTRAP)

    def _cache_snapshot(self, snapshot: Snapshot) -> None:
        self.cache.write_collection(
            CACHE_KEYS[USERS_COLLECTION], [user.to_dict() for user in snapshot.users]
        )
        self.cache.write_collection(
            CACHE_KEYS[EVENTS_COLLECTION], [event.to_dict() for event in snapshot.events]
        )

    # Write path

    async def persist_users(self, users: Sequence[User]) -> bool:
        """Replace the user collection in every reachable tier.

        Returns:
            Always True
        """
        return await self._persist(USERS_COLLECTION, list(users))

    async def persist_events(self, events: Sequence[EventRecord]) -> bool:
        """Replace the event collection in every reachable tier.

        Returns:
            Always True
        """
        return await self._persist(EVENTS_COLLECTION, list(events))

    async def _persist(self, collection: str, items: list[Any]) -> bool:
        records = [item.to_dict() for item in items]

        # Local copy first, before any network call
        self.cache.write_collection(CACHE_KEYS[collection], records)
        self.notifier.publish(collection, items)
        await self._ensure_started()

        errors: list[str] = []
        extra = {"collection": collection}

        if self.primary.is_ready:
            try:
                await self.primary.store.set(collection, index_by_id(records))
                logger.info(f"Saved {collection} to primary store", extra=extra)
                return self._finish(WriteResult(collection, StorageTier.PRIMARY))
            except Exception as e:
                errors.append(f"primary: {e}")
                logger.warning(
                    f"Failed to save {collection} to primary store, trying REST backend: {e}",
                    extra=extra,
                )

        if self.secondary is not None:
            try:
                await self.secondary.replace_collection(collection, records)
                logger.info(f"Saved {collection} to REST backend", extra=extra)
                return self._finish(WriteResult(collection, StorageTier.SECONDARY, errors=errors))
            except Exception as e:
                errors.append(f"secondary: {e}")
                logger.warning(
                    f"REST backend unavailable, {collection} saved locally only: {e}",
                    extra=extra,
                )

        return self._finish(WriteResult(collection, StorageTier.CACHE, errors=errors))

    async def update_user(self, user_id: str, updates: Mapping[str, Any]) -> bool:
        """Apply a partial update to one user on the REST backend only.

        The cache and the primary store are not touched.

        Returns:
            Always True
        """
        return await self._update(USERS_COLLECTION, user_id, updates)

    async def update_event(self, event_id: str, updates: Mapping[str, Any]) -> bool:
        """Apply a partial update to one event on the REST backend only.

        The cache and the primary store are not touched.

        Returns:
            Always True
        """
        return await self._update(EVENTS_COLLECTION, event_id, updates)

    async def _update(self, collection: str, record_id: str, updates: Mapping[str, Any]) -> bool:
        await self._ensure_started()
        extra = {"collection": collection}

        if self.secondary is None:
            logger.warning(
                f"No REST backend configured, update of {record_id} dropped", extra=extra
            )
            return self._finish(
                WriteResult(
                    collection, None, record_id=record_id, errors=["secondary: not configured"]
                )
            )

        try:
            await self.secondary.update_record(collection, record_id, _jsonable(updates))
        except Exception as e:
            logger.warning(f"Failed to update {collection}/{record_id}: {e}", extra=extra)
            return self._finish(
                WriteResult(collection, None, record_id=record_id, errors=[f"secondary: {e}"])
            )

        logger.info(f"Updated {collection}/{record_id} on REST backend", extra=extra)
        return self._finish(WriteResult(collection, StorageTier.SECONDARY, record_id=record_id))

    def _finish(self, result: WriteResult) -> bool:
        self._last_write_results[result.collection] = result
        if self.on_write_result is not None:
            try:
                self.on_write_result(result)
            except Exception as e:
                logger.error(f"Write result callback failed: {e}")
        return True

    def last_write_result(self, collection: str) -> WriteResult | None:
        """Outcome of the most recent write to a collection."""
        return self._last_write_results.get(collection)

    # Change notification

    def subscribe_to_users(self, callback: ChangeCallback) -> Unsubscribe:
        """Subscribe to user changes. Check ``supports_live_updates`` first."""
        return self.notifier.subscribe_users(callback)

    def subscribe_to_events(self, callback: ChangeCallback) -> Unsubscribe:
        """Subscribe to event changes. Check ``supports_live_updates`` first."""
        return self.notifier.subscribe_events(callback)
