"""
Sync result types.

A Snapshot is what the read path returns; a WriteResult records how far
a write travelled down the tier chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..models import EventRecord, User


class StorageTier(Enum):
    """Data sources, in read priority order."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    CACHE = "cache"
    BOOTSTRAP = "bootstrap"


@dataclass
class Snapshot:
    """Paired users and events at a point in time."""

    users: list[User] = field(default_factory=list)
    events: list[EventRecord] = field(default_factory=list)
    source: StorageTier = StorageTier.CACHE

    @property
    def is_empty(self) -> bool:
        return not self.users and not self.events

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source": self.source.value,
            "users": [user.to_dict() for user in self.users],
            "events": [event.to_dict() for event in self.events],
        }


@dataclass
class WriteResult:
    """Outcome of a persist or update call.

    ``tier`` is the most durable tier that accepted the write: PRIMARY or
    SECONDARY when a remote store took it, CACHE when only the local copy
    was written, None when a single-record update reached no store.
    """

    collection: str
    tier: StorageTier | None
    record_id: str | None = None
    errors: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def degraded(self) -> bool:
        """True when no remote store accepted the write."""
        return self.tier not in (StorageTier.PRIMARY, StorageTier.SECONDARY)
