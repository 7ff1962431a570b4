"""
Realtime database client and connection handle.

Talks to a realtime database through its REST protocol: every location
is addressable as ``{database_url}/{path}.json``; GET returns the value
(``null`` when missing) and PUT overwrites it.

The synchronizer never checks for a nullable client. It holds a
PrimaryConnection whose state says explicitly whether the primary is
not configured, closed, or open.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

import aiohttp

from ..config import PrimaryConfig
from ..exceptions import (
    AuthenticationError,
    MalformedResponseError,
    RemoteResponseError,
    StorageConnectionError,
)
from .base import DataSnapshot, PrimaryStore

logger = logging.getLogger(__name__)


class RealtimeDatabaseClient(PrimaryStore):
    """Async client for a realtime database's REST protocol.

    Example:
        >>> client = RealtimeDatabaseClient("https://my-db.firebaseio.com")
        >>> await client.initialize()
        >>> snapshot = await client.get("users")
        >>> snapshot.exists()
        True
    """

    def __init__(
        self,
        database_url: str,
        auth_token: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            database_url: Root URL of the database
            auth_token: Optional token sent as the ``auth`` query parameter
            session: Optional shared aiohttp session (not closed by this client)
        """
        self.database_url = database_url.rstrip("/")
        self.auth_token = auth_token
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: PrimaryConfig) -> RealtimeDatabaseClient:
        if not config.database_url:
            raise StorageConnectionError("primary", ValueError("database_url is not set"))
        return cls(config.database_url, auth_token=config.auth_token)

    async def initialize(self) -> None:
        """Create the HTTP session if one was not supplied."""
        if self._session is None:
            self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _url(self, path: str) -> str:
        return f"{self.database_url}/{path.strip('/')}.json"

    def _params(self) -> dict[str, str]:
        return {"auth": self.auth_token} if self.auth_token else {}

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise StorageConnectionError(self.database_url, RuntimeError("Client not initialized"))
        return self._session

    async def _check_response(self, url: str, response: aiohttp.ClientResponse) -> None:
        if 200 <= response.status < 300:
            return
        body = await response.text()
        if response.status in (401, 403):
            raise AuthenticationError(url, body or None)
        raise RemoteResponseError(url, response.status, body)

    async def get(self, path: str) -> DataSnapshot:
        """Read the value stored at a location."""
        session = self._require_session()
        url = self._url(path)
        try:
            async with session.get(url, params=self._params()) as response:
                await self._check_response(url, response)
                text = await response.text()
        except aiohttp.ClientError as e:
            raise StorageConnectionError(url, e) from e

        try:
            value = json.loads(text) if text.strip() else None
        except json.JSONDecodeError as e:
            raise MalformedResponseError(url, "JSON", "unparseable body") from e

        return DataSnapshot(key=path, value=value)

    async def set(self, path: str, value: Any) -> None:
        """Overwrite the value stored at a location."""
        session = self._require_session()
        url = self._url(path)
        try:
            async with session.put(url, params=self._params(), json=value) as response:
                await self._check_response(url, response)
        except aiohttp.ClientError as e:
            raise StorageConnectionError(url, e) from e


class ConnectionState(Enum):
    """State of the primary connection."""

    NOT_CONFIGURED = "not_configured"  # No database configured or disabled
    CLOSED = "closed"  # Configured but not (or no longer) connected
    OPEN = "open"  # Ready for reads and writes


class PrimaryConnection:
    """Handle on the primary store with an explicit readiness state.

    Example:
        >>> connection = PrimaryConnection.from_config(config.primary)
        >>> await connection.open()
        >>> if connection.is_ready:
        ...     snapshot = await connection.store.get("users")
    """

    def __init__(self, store: PrimaryStore | None = None, configured: bool = True) -> None:
        self._store = store
        if not configured:
            self._state = ConnectionState.NOT_CONFIGURED
        else:
            self._state = ConnectionState.CLOSED
        self._last_error: str | None = None

    @classmethod
    def not_configured(cls) -> PrimaryConnection:
        return cls(configured=False)

    @classmethod
    def from_config(cls, config: PrimaryConfig) -> PrimaryConnection:
        if not config.is_configured:
            logger.info("Primary store not configured, running without it")
            return cls.not_configured()
        return cls(RealtimeDatabaseClient.from_config(config))

    @classmethod
    def from_store(cls, store: PrimaryStore) -> PrimaryConnection:
        """Wrap an already usable store; the connection starts open."""
        connection = cls(store)
        connection._state = ConnectionState.OPEN
        return connection

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == ConnectionState.OPEN

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def store(self) -> PrimaryStore:
        """The underlying store.

        Raises:
            StorageConnectionError: If the connection is not open
        """
        if self._store is None or not self.is_ready:
            raise StorageConnectionError(
                "primary", RuntimeError(f"Primary connection is {self._state.value}")
            )
        return self._store

    async def open(self) -> None:
        """Open the connection.

        Failures are logged and leave the connection closed; the
        synchronizer then skips the primary tier.
        """
        if self._state != ConnectionState.CLOSED or self._store is None:
            return

        try:
            await self._store.initialize()
            self._state = ConnectionState.OPEN
            self._last_error = None
            logger.info("Primary store connection ready")
        except Exception as e:
            self._last_error = str(e)
            logger.warning(f"Primary store not available, continuing without it: {e}")

    async def close(self) -> None:
        if self._store is not None and self._state == ConnectionState.OPEN:
            await self._store.close()
            self._state = ConnectionState.CLOSED
