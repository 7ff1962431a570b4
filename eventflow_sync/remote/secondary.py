"""
REST backend client.

Endpoints, relative to the base URL (default http://localhost:3001/api):
    GET  /{collection}          -> JSON array of records
    PUT  /{collection}          body: JSON array, overwrites the collection
    PUT  /{collection}/{id}     body: partial record, updates one record
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import aiohttp

from ..config import DEFAULT_API_BASE
from ..exceptions import (
    AuthenticationError,
    MalformedResponseError,
    RemoteResponseError,
    StorageConnectionError,
)
from .base import SecondaryStore

logger = logging.getLogger(__name__)


class RestBackendClient(SecondaryStore):
    """Async client for the REST collection backend.

    Timeouts are left to the caller: the synchronizer bounds reads itself
    and cancels in-flight requests when the bound expires.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the API
            session: Optional shared aiohttp session (not closed by this client)
        """
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def initialize(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> RestBackendClient:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _url(self, collection: str, record_id: str | None = None) -> str:
        url = f"{self.base_url}/{collection}"
        if record_id is not None:
            url += f"/{quote(str(record_id), safe='')}"
        return url

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _check_response(self, url: str, response: aiohttp.ClientResponse) -> None:
        if 200 <= response.status < 300:
            return
        body = await response.text()
        if response.status in (401, 403):
            raise AuthenticationError(url, body or None)
        raise RemoteResponseError(url, response.status, body)

    async def fetch_collection(self, collection: str) -> list[Any]:
        """GET a collection and return its records."""
        session = await self._get_session()
        url = self._url(collection)
        try:
            async with session.get(url) as response:
                await self._check_response(url, response)
                text = await response.text()
        except aiohttp.ClientError as e:
            raise StorageConnectionError(url, e) from e

        try:
            body = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(url, "JSON array", "unparseable body") from e

        if not isinstance(body, list):
            raise MalformedResponseError(url, "JSON array", type(body).__name__)

        return body

    async def replace_collection(self, collection: str, records: Sequence[Any]) -> None:
        """PUT the full collection, replacing what the backend holds."""
        await self._put(self._url(collection), list(records))

    async def update_record(self, collection: str, record_id: str, updates: dict[str, Any]) -> None:
        """PUT a partial record to the per-record endpoint."""
        await self._put(self._url(collection, record_id), updates)

    async def _put(self, url: str, payload: Any) -> None:
        session = await self._get_session()
        try:
            async with session.put(url, json=payload) as response:
                await self._check_response(url, response)
        except aiohttp.ClientError as e:
            raise StorageConnectionError(url, e) from e
