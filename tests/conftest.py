"""
Shared test configuration and fixtures.

Provides in-memory fakes of the primary store and the REST backend so
synchronizer tests can force any combination of tier failures.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Sequence
from typing import Any

import pytest

from eventflow_sync.cache import LocalCache
from eventflow_sync.exceptions import RemoteResponseError, StorageConnectionError
from eventflow_sync.models import EventRecord, User, UserRole
from eventflow_sync.remote import DataSnapshot, PrimaryStore, SecondaryStore


class FakePrimaryStore(PrimaryStore):
    """Keyed-document store held in a dict.

    Set ``fail`` to make every call raise a connection error.
    """

    def __init__(self, data: dict[str, Any] | None = None, fail: bool = False):
        self.data: dict[str, Any] = data or {}
        self.fail = fail
        self.get_calls: list[str] = []
        self.set_calls: list[tuple[str, Any]] = []
        self.closed = False

    async def get(self, path: str) -> DataSnapshot:
        self.get_calls.append(path)
        if self.fail:
            raise StorageConnectionError("fake-primary")
        return DataSnapshot(key=path, value=copy.deepcopy(self.data.get(path)))

    async def set(self, path: str, value: Any) -> None:
        self.set_calls.append((path, copy.deepcopy(value)))
        if self.fail:
            raise StorageConnectionError("fake-primary")
        self.data[path] = copy.deepcopy(value)

    async def close(self) -> None:
        self.closed = True


class FakeSecondaryStore(SecondaryStore):
    """REST backend held in a dict of collection -> list of records.

    ``fail`` raises a connection error, ``status`` raises a response
    error with that status, ``delay`` sleeps before answering reads.
    """

    def __init__(
        self,
        collections: dict[str, list[Any]] | None = None,
        fail: bool = False,
        status: int | None = None,
        delay: float = 0.0,
    ):
        self.collections: dict[str, list[Any]] = collections or {}
        self.fail = fail
        self.status = status
        self.delay = delay
        self.fetch_calls: list[str] = []
        self.replace_calls: list[tuple[str, list[Any]]] = []
        self.update_calls: list[tuple[str, str, dict[str, Any]]] = []
        self.cancelled = 0
        self.closed = False

    def _maybe_fail(self, endpoint: str) -> None:
        if self.fail:
            raise StorageConnectionError(endpoint)
        if self.status is not None:
            raise RemoteResponseError(endpoint, self.status)

    async def fetch_collection(self, collection: str) -> list[Any]:
        self.fetch_calls.append(collection)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        self._maybe_fail(f"/{collection}")
        return copy.deepcopy(self.collections.get(collection, []))

    async def replace_collection(self, collection: str, records: Sequence[Any]) -> None:
        self.replace_calls.append((collection, copy.deepcopy(list(records))))
        self._maybe_fail(f"/{collection}")
        self.collections[collection] = copy.deepcopy(list(records))

    async def update_record(self, collection: str, record_id: str, updates: dict[str, Any]) -> None:
        self.update_calls.append((collection, record_id, dict(updates)))
        self._maybe_fail(f"/{collection}/{record_id}")

    async def close(self) -> None:
        self.closed = True


def make_user(user_id: str, role: UserRole = UserRole.COMMON, **overrides: Any) -> User:
    """Create a test user."""
    return User(
        id=user_id,
        name=overrides.get("name", f"User {user_id}"),
        email=overrides.get("email", f"user{user_id}@example.com"),
        password=overrides.get("password", "secret"),
        role=role,
        active=overrides.get("active", True),
    )


def make_event(event_id: str, **fields: Any) -> EventRecord:
    """Create a test event."""
    return EventRecord(
        id=event_id,
        fields=fields
        or {"date": "2024-05-10", "time": "14:00", "description": f"Event {event_id}"},
    )


@pytest.fixture
def cache() -> LocalCache:
    """Empty in-memory cache."""
    return LocalCache.in_memory()


@pytest.fixture
def primary_store() -> FakePrimaryStore:
    return FakePrimaryStore()


@pytest.fixture
def secondary_store() -> FakeSecondaryStore:
    return FakeSecondaryStore()
