"""
Abstract remote store interfaces.

Defines the contracts the synchronizer relies on for the primary
(keyed-document) store and the secondary (REST collection) store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DataSnapshot:
    """Value read from a keyed-document store location.

    A missing location reads as ``value=None``.
    """

    key: str
    value: Any = None

    def exists(self) -> bool:
        return self.value is not None


class PrimaryStore(ABC):
    """Keyed-document store addressed by collection name."""

    async def initialize(self) -> None:
        """Prepare connections. Stores without setup keep the default."""
        return None

    @abstractmethod
    async def get(self, path: str) -> DataSnapshot:
        """Read the whole value stored at ``path``.

        Raises:
            StorageConnectionError: If the store cannot be reached
            AuthenticationError: If the store rejects the credentials
            RemoteResponseError: If the store answers with an error status
        """
        ...

    @abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Overwrite the whole value stored at ``path``.

        Raises:
            StorageConnectionError: If the store cannot be reached
            AuthenticationError: If the store rejects the credentials
            RemoteResponseError: If the store answers with an error status
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        ...


class SecondaryStore(ABC):
    """REST backend exposing one endpoint per collection."""

    async def initialize(self) -> None:
        """Prepare connections. Stores without setup keep the default."""
        return None

    @abstractmethod
    async def fetch_collection(self, collection: str) -> list[Any]:
        """Fetch every record of a collection.

        Raises:
            StorageConnectionError: If the backend cannot be reached
            RemoteResponseError: If the backend answers with an error status
            MalformedResponseError: If the body is not a JSON array
        """
        ...

    @abstractmethod
    async def replace_collection(self, collection: str, records: Sequence[Any]) -> None:
        """Overwrite a whole collection."""
        ...

    @abstractmethod
    async def update_record(self, collection: str, record_id: str, updates: dict[str, Any]) -> None:
        """Apply a partial update to one record."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        ...
