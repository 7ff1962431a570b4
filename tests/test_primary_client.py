"""Tests for the realtime database client and the primary connection handle."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import pytest
from aiohttp import test_utils, web

from eventflow_sync.config import PrimaryConfig
from eventflow_sync.exceptions import (
    AuthenticationError,
    RemoteResponseError,
    StorageConnectionError,
)
from eventflow_sync.remote import ConnectionState, PrimaryConnection, RealtimeDatabaseClient


class FakeRealtimeDatabase:
    """In-memory database speaking the ``{path}.json`` REST protocol."""

    def __init__(self, required_token: str | None = None) -> None:
        self.tree: dict[str, Any] = {}
        self.required_token = required_token
        self.fail_status: int | None = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/{path}.json", self.handle_get)
        app.router.add_put("/{path}.json", self.handle_put)
        return app

    def _check(self, request: web.Request) -> web.Response | None:
        if self.fail_status:
            return web.json_response({"error": "boom"}, status=self.fail_status)
        if self.required_token and request.query.get("auth") != self.required_token:
            return web.json_response({"error": "Permission denied"}, status=401)
        return None

    async def handle_get(self, request: web.Request) -> web.StreamResponse:
        error = self._check(request)
        if error is not None:
            return error
        return web.Response(
            text=json.dumps(self.tree.get(request.match_info["path"])),
            content_type="application/json",
        )

    async def handle_put(self, request: web.Request) -> web.StreamResponse:
        error = self._check(request)
        if error is not None:
            return error
        value = await request.json()
        self.tree[request.match_info["path"]] = value
        return web.json_response(value)


@pytest.fixture
def database() -> FakeRealtimeDatabase:
    return FakeRealtimeDatabase()


@pytest.fixture
async def server(database: FakeRealtimeDatabase) -> AsyncIterator[test_utils.TestServer]:
    server = test_utils.TestServer(database.app())
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
async def client(server: test_utils.TestServer) -> AsyncIterator[RealtimeDatabaseClient]:
    client = RealtimeDatabaseClient(str(server.make_url("/")))
    await client.initialize()
    yield client
    await client.close()


class TestRealtimeDatabaseClient:
    """Tests for RealtimeDatabaseClient."""

    async def test_missing_location_does_not_exist(self, client: RealtimeDatabaseClient) -> None:
        snapshot = await client.get("users")

        assert snapshot.key == "users"
        assert not snapshot.exists()
        assert snapshot.value is None

    async def test_set_then_get(self, client: RealtimeDatabaseClient) -> None:
        keyed = {"1": {"id": "1", "name": "Ana"}, "2": {"id": "2", "name": "Bruno"}}

        await client.set("users", keyed)
        snapshot = await client.get("users")

        assert snapshot.exists()
        assert snapshot.value == keyed

    async def test_set_overwrites(
        self, client: RealtimeDatabaseClient, database: FakeRealtimeDatabase
    ) -> None:
        database.tree["events"] = {"old": {"id": "old"}}

        await client.set("events", {"new": {"id": "new"}})

        assert database.tree["events"] == {"new": {"id": "new"}}

    async def test_error_status(
        self, client: RealtimeDatabaseClient, database: FakeRealtimeDatabase
    ) -> None:
        database.fail_status = 500

        with pytest.raises(RemoteResponseError):
            await client.get("users")

    async def test_auth_token_is_sent(self) -> None:
        database = FakeRealtimeDatabase(required_token="secret")
        secured = test_utils.TestServer(database.app())
        await secured.start_server()
        try:
            good = RealtimeDatabaseClient(str(secured.make_url("/")), auth_token="secret")
            bad = RealtimeDatabaseClient(str(secured.make_url("/")))
            await good.initialize()
            await bad.initialize()

            await good.set("users", {"1": {"id": "1"}})
            with pytest.raises(AuthenticationError):
                await bad.get("users")

            await good.close()
            await bad.close()
        finally:
            await secured.close()

    async def test_uninitialized_client_raises(self) -> None:
        client = RealtimeDatabaseClient("https://example.invalid")

        with pytest.raises(StorageConnectionError):
            await client.get("users")

    async def test_unreachable_database(self) -> None:
        port = test_utils.unused_port()
        client = RealtimeDatabaseClient(f"http://127.0.0.1:{port}")
        await client.initialize()
        try:
            with pytest.raises(StorageConnectionError):
                await client.get("users")
        finally:
            await client.close()

    def test_url_building(self) -> None:
        client = RealtimeDatabaseClient("https://db.example.com/")

        assert client._url("users") == "https://db.example.com/users.json"
        assert client._url("/events/") == "https://db.example.com/events.json"


class TestPrimaryConnection:
    """Tests for PrimaryConnection states."""

    def test_not_configured(self) -> None:
        connection = PrimaryConnection.not_configured()

        assert connection.state is ConnectionState.NOT_CONFIGURED
        assert not connection.is_ready
        with pytest.raises(StorageConnectionError):
            _ = connection.store

    def test_from_config_without_url(self) -> None:
        connection = PrimaryConnection.from_config(PrimaryConfig(database_url=None))

        assert connection.state is ConnectionState.NOT_CONFIGURED

    def test_from_disabled_config(self) -> None:
        connection = PrimaryConnection.from_config(PrimaryConfig(enabled=False))

        assert connection.state is ConnectionState.NOT_CONFIGURED

    async def test_open_and_close(self, server: test_utils.TestServer) -> None:
        connection = PrimaryConnection.from_config(
            PrimaryConfig(database_url=str(server.make_url("/")))
        )
        assert connection.state is ConnectionState.CLOSED

        await connection.open()
        assert connection.is_ready
        assert isinstance(connection.store, RealtimeDatabaseClient)

        await connection.close()
        assert connection.state is ConnectionState.CLOSED
        assert not connection.is_ready

    async def test_open_not_configured_is_noop(self) -> None:
        connection = PrimaryConnection.not_configured()

        await connection.open()

        assert connection.state is ConnectionState.NOT_CONFIGURED

    async def test_failed_open_stays_closed(self) -> None:
        class ExplodingClient(RealtimeDatabaseClient):
            async def initialize(self) -> None:
                raise StorageConnectionError("primary", RuntimeError("no network"))

        connection = PrimaryConnection(ExplodingClient("https://db.example.com"))

        await connection.open()

        assert connection.state is ConnectionState.CLOSED
        assert "Connection failed" in (connection.last_error or "")

    def test_from_store_is_open(self, primary_store) -> None:
        connection = PrimaryConnection.from_store(primary_store)

        assert connection.is_ready
        assert connection.store is primary_store
