"""
Remote stores.

Provides the realtime database client (primary tier), the REST backend
client (secondary tier), and the abstract interfaces both implement.

Example:
    >>> from eventflow_sync.remote import PrimaryConnection, RestBackendClient
    >>> primary = PrimaryConnection.from_config(config.primary)
    >>> secondary = RestBackendClient(config.api_base)
"""

from .base import DataSnapshot, PrimaryStore, SecondaryStore
from .primary import ConnectionState, PrimaryConnection, RealtimeDatabaseClient
from .secondary import RestBackendClient

__all__ = [
    "DataSnapshot",
    "PrimaryStore",
    "SecondaryStore",
    "ConnectionState",
    "PrimaryConnection",
    "RealtimeDatabaseClient",
    "RestBackendClient",
]
