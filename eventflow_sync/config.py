"""
Configuration for the sync layer.

Configuration can be provided directly, via environment variables,
or from a YAML settings file.

Environment Variables:
    EVENTFLOW_FIREBASE_API_KEY: Realtime database API key
    EVENTFLOW_FIREBASE_AUTH_DOMAIN: Auth domain of the project
    EVENTFLOW_FIREBASE_PROJECT_ID: Project identifier
    EVENTFLOW_FIREBASE_STORAGE_BUCKET: Storage bucket of the project
    EVENTFLOW_FIREBASE_MESSAGING_SENDER_ID: Messaging sender identifier
    EVENTFLOW_FIREBASE_DATABASE_URL: Realtime database URL
    EVENTFLOW_FIREBASE_APP_ID: App identifier
    EVENTFLOW_FIREBASE_AUTH_TOKEN: Optional token sent as the ``auth`` parameter
    EVENTFLOW_FIREBASE_TIMEOUT: Optional read timeout for the primary (seconds)
    EVENTFLOW_USE_FIREBASE: Set to "false" to run without the primary store
    EVENTFLOW_API_BASE: Base URL of the REST backend
    EVENTFLOW_API_TIMEOUT: REST read timeout in seconds (default: 3.0)
    EVENTFLOW_CACHE_PATH: Directory of the on-device cache
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_API_BASE = "http://localhost:3001/api"
DEFAULT_SECONDARY_TIMEOUT = 3.0  # seconds

USERS_COLLECTION = "users"
EVENTS_COLLECTION = "events"

LOCAL_USERS_KEY = "eventflow_users"
LOCAL_EVENTS_KEY = "eventflow_events"

CACHE_KEYS = {
    USERS_COLLECTION: LOCAL_USERS_KEY,
    EVENTS_COLLECTION: LOCAL_EVENTS_KEY,
}


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float | None) -> float | None:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class PrimaryConfig:
    """Connection parameters of the realtime database.

    Only ``database_url`` (and ``auth_token`` when the database rules
    require it) is used on the wire; the remaining identifiers are kept
    so one settings block can describe the whole project.
    """

    api_key: str = "demo-api-key"
    auth_domain: str = "eventflow-demo.firebaseapp.com"
    project_id: str = "eventflow-demo"
    storage_bucket: str = "eventflow-demo.firebasestorage.app"
    messaging_sender_id: str = "000000000000"
    database_url: str | None = "https://eventflow-demo-default-rtdb.firebaseio.com"
    app_id: str = "1:000000000000:web:eventflowdemo"
    auth_token: str | None = None
    enabled: bool = True

    @property
    def is_configured(self) -> bool:
        """True when the primary can be reached at all."""
        return self.enabled and bool(self.database_url)

    @classmethod
    def from_environment(cls) -> PrimaryConfig:
        """Create primary configuration from environment variables."""
        defaults = cls()
        return cls(
            api_key=os.environ.get("EVENTFLOW_FIREBASE_API_KEY", defaults.api_key),
            auth_domain=os.environ.get("EVENTFLOW_FIREBASE_AUTH_DOMAIN", defaults.auth_domain),
            project_id=os.environ.get("EVENTFLOW_FIREBASE_PROJECT_ID", defaults.project_id),
            storage_bucket=os.environ.get(
                "EVENTFLOW_FIREBASE_STORAGE_BUCKET", defaults.storage_bucket
            ),
            messaging_sender_id=os.environ.get(
                "EVENTFLOW_FIREBASE_MESSAGING_SENDER_ID", defaults.messaging_sender_id
            ),
            database_url=os.environ.get(
                "EVENTFLOW_FIREBASE_DATABASE_URL", defaults.database_url
            ),
            app_id=os.environ.get("EVENTFLOW_FIREBASE_APP_ID", defaults.app_id),
            auth_token=os.environ.get("EVENTFLOW_FIREBASE_AUTH_TOKEN"),
            enabled=_env_bool("EVENTFLOW_USE_FIREBASE", True),
        )


@dataclass
class SyncConfig:
    """Configuration for the synchronizer and its stores.

    Attributes:
        primary: Realtime database connection parameters
        api_base: Base URL of the REST backend
        secondary_timeout: Hard timeout for REST reads, in seconds
        primary_read_timeout: Optional timeout for primary reads (None: no timeout)
        cache_path: Directory for the on-device cache
        options: Additional options
    """

    primary: PrimaryConfig = field(default_factory=PrimaryConfig)
    api_base: str = DEFAULT_API_BASE
    secondary_timeout: float = DEFAULT_SECONDARY_TIMEOUT
    primary_read_timeout: float | None = None
    cache_path: str | None = None

    options: dict[str, Any] = field(default_factory=dict)

    def resolved_cache_path(self) -> Path:
        """Cache directory, defaulting to ~/.eventflow/cache."""
        if self.cache_path:
            return Path(self.cache_path).expanduser()
        return Path.home() / ".eventflow" / "cache"

    @classmethod
    def from_environment(cls) -> SyncConfig:
        """Create configuration from environment variables.

        Returns:
            SyncConfig populated from environment variables
        """
        return cls(
            primary=PrimaryConfig.from_environment(),
            api_base=os.environ.get("EVENTFLOW_API_BASE", DEFAULT_API_BASE),
            secondary_timeout=_env_float("EVENTFLOW_API_TIMEOUT", DEFAULT_SECONDARY_TIMEOUT)
            or DEFAULT_SECONDARY_TIMEOUT,
            primary_read_timeout=_env_float("EVENTFLOW_FIREBASE_TIMEOUT", None),
            cache_path=os.environ.get("EVENTFLOW_CACHE_PATH"),
        )

    @classmethod
    def from_file(cls, path: Path | str) -> SyncConfig:
        """Load configuration from a YAML settings file.

        Values missing from the file fall back to the environment and then
        to the defaults.

        ```yaml
        eventflow:
          api_base: "http://localhost:3001/api"
          secondary_timeout: 3.0
          cache_path: "~/.eventflow/cache"
          primary:
            database_url: "https://my-project-default-rtdb.firebaseio.com"
            project_id: "my-project"
        ```

        Args:
            path: Path to the YAML file

        Returns:
            SyncConfig with file values applied over the environment
        """
        config = cls.from_environment()

        path = Path(path)
        if not path.exists():
            return config

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        section = data.get("eventflow", {}) or {}
        primary_section = section.get("primary", {}) or {}

        primary_fields = {f.name for f in fields(PrimaryConfig)}
        for key, value in primary_section.items():
            if key in primary_fields:
                setattr(config.primary, key, value)

        if "api_base" in section:
            config.api_base = section["api_base"]
        if "secondary_timeout" in section:
            config.secondary_timeout = float(section["secondary_timeout"])
        if "primary_read_timeout" in section:
            timeout = section["primary_read_timeout"]
            config.primary_read_timeout = float(timeout) if timeout is not None else None
        if "cache_path" in section:
            config.cache_path = section["cache_path"]
        config.options.update(section.get("options", {}) or {})

        return config
