"""
Structured logging for the sync layer.

Every sync component logs through a SyncLoggerAdapter that stamps the
component name on each record; callers add the collection or tier a step
works on. StructuredJsonFormatter renders those fields as top-level JSON
keys so a collector can filter on them.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

ROOT_LOGGER = "eventflow_sync"

# Context keys rendered right after the message, in this order
CONTEXT_FIELDS = ("component", "collection", "tier")

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredJsonFormatter(logging.Formatter):
    """
    JSON formatter emitting one object per line.

    Fields: timestamp (UTC, ISO 8601), level, logger, message, then the
    sync context (component, collection, tier) when present, then any
    other extra values. Values that are not JSON serializable are
    rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_FIELDS:
            if key in record.__dict__:
                entry[key] = record.__dict__[key]

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in entry or key.startswith("_"):
                continue
            entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Send a logger's output through StructuredJsonFormatter.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure (default: root logger)
        stream: Output stream (default: stdout)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    # Replace, not add, so repeated calls do not duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


class SyncLoggerAdapter(logging.LoggerAdapter):
    """
    Adds the adapter's context (e.g. ``{"component": "synchronizer"}``)
    to every record. Per-call ``extra`` values such as the collection or
    tier are kept and win over the adapter's own on a key clash.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_sync_logger(component: str, **context: Any) -> SyncLoggerAdapter:
    """
    Logger for a sync component.

    Args:
        component: Component name (e.g. 'synchronizer', 'cache'); the
            logger is named 'eventflow_sync.{component}'
        **context: Extra fields stamped on every record

    Returns:
        Adapter carrying ``component`` and the given context
    """
    logger = logging.getLogger(f"{ROOT_LOGGER}.{component}")
    return SyncLoggerAdapter(logger, {"component": component, **context})
