"""Tests for structured logging helpers."""

from __future__ import annotations

import io
import json
import logging

from eventflow_sync.cache import LocalCache
from eventflow_sync.config import LOCAL_USERS_KEY
from eventflow_sync.logging_utils import (
    StructuredJsonFormatter,
    SyncLoggerAdapter,
    configure_structured_logging,
    get_sync_logger,
)
from eventflow_sync.sync import Synchronizer


def _record(msg: str = "Saved users", **extra) -> logging.LogRecord:
    record = logging.LogRecord("eventflow_sync.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJsonFormatter:
    """Tests for StructuredJsonFormatter."""

    def test_standard_fields(self) -> None:
        payload = json.loads(StructuredJsonFormatter().format(_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "eventflow_sync.test"
        assert payload["message"] == "Saved users"
        assert "timestamp" in payload
        assert "lineno" not in payload

    def test_context_fields_follow_message(self) -> None:
        line = StructuredJsonFormatter().format(
            _record(attempt=2, tier="cache", collection="users", component="synchronizer")
        )

        assert list(json.loads(line))[4:] == ["component", "collection", "tier", "attempt"]

    def test_unserializable_extra_is_stringified(self) -> None:
        payload = json.loads(StructuredJsonFormatter().format(_record(tier=object())))

        assert isinstance(payload["tier"], str)


class TestSyncLoggerAdapter:
    """Tests for SyncLoggerAdapter and get_sync_logger."""

    def test_merges_extra(self) -> None:
        adapter = SyncLoggerAdapter(logging.getLogger("x"), {"component": "synchronizer"})

        _, kwargs = adapter.process("msg", {"extra": {"collection": "events"}})

        assert kwargs["extra"] == {"component": "synchronizer", "collection": "events"}

    def test_call_extra_wins(self) -> None:
        adapter = SyncLoggerAdapter(logging.getLogger("x"), {"tier": "primary"})

        _, kwargs = adapter.process("msg", {"extra": {"tier": "cache"}})

        assert kwargs["extra"] == {"tier": "cache"}

    def test_get_sync_logger(self) -> None:
        adapter = get_sync_logger("cache", store="memory")

        assert adapter.logger.name == "eventflow_sync.cache"
        assert adapter.extra == {"component": "cache", "store": "memory"}


class TestConfigureStructuredLogging:
    """Tests for configure_structured_logging."""

    def test_replaces_handlers(self) -> None:
        name = "eventflow_sync.test_configure"
        configure_structured_logging(logging.DEBUG, name)
        logger = configure_structured_logging(logging.WARNING, name)

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        assert logger.level == logging.WARNING
        logger.handlers.clear()

    async def test_synchronizer_records_carry_context(self) -> None:
        """Sync components log with their component and tier fields."""
        stream = io.StringIO()
        logger = configure_structured_logging(logging.INFO, "eventflow_sync", stream=stream)
        try:
            cache = LocalCache.in_memory()
            await Synchronizer(cache).fetch_initial_data()
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        bootstrap = [e for e in entries if e["message"].startswith("Using bootstrap users")]
        assert bootstrap
        assert bootstrap[0]["component"] == "sources"
        assert bootstrap[0]["tier"] == "bootstrap"
        assert cache.read_collection(LOCAL_USERS_KEY)
