"""
Record types for the synchronized collections.

Users carry a fixed schema; events are opaque to the sync layer apart
from the identifier used as the storage key. Both serialize to flat
JSON objects, the shape every tier stores.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

_USER_FIELDS = ("id", "name", "email", "password", "role", "active")


class UserRole(Enum):
    """Roles a user can hold."""

    ADMIN = "admin"
    COMMON = "common"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: Any) -> UserRole:
        """Parse a role from its value or member name, case-insensitively.

        Raises:
            ValidationError: If the value is not one of the known roles
        """
        if isinstance(value, UserRole):
            return value
        text = str(value).strip().lower()
        for role in cls:
            if text in (role.value, role.name.lower()):
                return role
        raise ValidationError("role", "unknown role", str(value))


def _record_id(data: Mapping[str, Any]) -> str:
    raw = data.get("id")
    if raw is None or raw == "":
        raise ValidationError("id", "record has no identifier")
    return str(raw)


@dataclass
class User:
    """An application user."""

    id: str
    name: str
    email: str
    password: str
    role: UserRole
    active: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": self.role.value,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        """Deserialize from dictionary.

        Raises:
            ValidationError: If the id is missing or the role is unknown
        """
        if not isinstance(data, Mapping):
            raise ValidationError("user", "record is not an object", type(data).__name__)
        return cls(
            id=_record_id(data),
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=UserRole.parse(data.get("role")),
            active=bool(data.get("active", True)),
            extra={k: v for k, v in data.items() if k not in _USER_FIELDS},
        )


@dataclass
class EventRecord:
    """An event request.

    Only ``id`` is interpreted; date, time, description and any other
    domain fields travel untouched in ``fields``.
    """

    id: str
    fields: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"id": self.id, **self.fields}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EventRecord:
        """Deserialize from dictionary.

        Raises:
            ValidationError: If the id is missing
        """
        if not isinstance(data, Mapping):
            raise ValidationError("event", "record is not an object", type(data).__name__)
        return cls(
            id=_record_id(data),
            fields={k: v for k, v in data.items() if k != "id"},
        )


def bootstrap_users() -> list[User]:
    """Seed users used when no tier holds any user."""
    return [
        User(
            id="1",
            name="Administrator",
            email="admin@demo.com",
            password="123",
            role=UserRole.ADMIN,
        ),
        User(
            id="2",
            name="Common User",
            email="user@demo.com",
            password="123",
            role=UserRole.COMMON,
        ),
        User(
            id="3",
            name="Viewer",
            email="viewer@demo.com",
            password="123",
            role=UserRole.VIEWER,
        ),
    ]


def index_by_id(records: Iterable[Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    """Convert a record sequence into the keyed form (id -> record).

    Later records win when an identifier repeats.
    """
    keyed: dict[str, dict[str, Any]] = {}
    for record in records:
        record_id = _record_id(record)
        if record_id in keyed:
            logger.warning(f"Duplicate record id {record_id!r}, keeping the last one")
        keyed[record_id] = dict(record)
    return keyed


def records_from_value(value: Any) -> list[dict[str, Any]]:
    """Convert a keyed store value into a list of record dicts.

    Accepts a mapping (id -> record), a list (stores may return arrays
    with holes for numeric keys) or None for a missing collection. A
    record without its own ``id`` takes the mapping key.

    Raises:
        ValidationError: If the value or one of its entries is not an object
    """
    if value is None:
        return []

    if isinstance(value, Mapping):
        records = []
        for key, record in value.items():
            if not isinstance(record, Mapping):
                raise ValidationError("record", "entry is not an object", str(key))
            record = dict(record)
            record.setdefault("id", str(key))
            records.append(record)
        return records

    if isinstance(value, list):
        records = []
        for index, record in enumerate(value):
            if record is None:
                continue
            if not isinstance(record, Mapping):
                raise ValidationError("record", "entry is not an object", str(index))
            record = dict(record)
            record.setdefault("id", str(index))
            records.append(record)
        return records

    raise ValidationError("collection", "value is not a collection", type(value).__name__)


def users_from_records(records: Iterable[Mapping[str, Any]]) -> list[User]:
    return [User.from_dict(record) for record in records]


def events_from_records(records: Iterable[Mapping[str, Any]]) -> list[EventRecord]:
    return [EventRecord.from_dict(record) for record in records]
