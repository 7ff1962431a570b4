"""
Custom exceptions for eventflow sync.

Store clients raise these exceptions so the synchronizer can
tell a failed tier apart from a programming error and fall back.
"""


class SyncStorageError(Exception):
    """Base exception for all sync storage errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageIOError(SyncStorageError):
    """Raised when a local storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class StorageQuotaError(SyncStorageError):
    """Raised when a local store refuses a write because it is full."""

    def __init__(self, key: str, size_bytes: int, max_bytes: int):
        details = {"key": key, "size_bytes": size_bytes, "max_bytes": max_bytes}
        super().__init__(
            f"Storage quota exceeded writing {key}: {size_bytes} > {max_bytes} bytes",
            details,
        )
        self.key = key
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class StorageConnectionError(SyncStorageError):
    """Raised when connection to a remote store fails.

    Note: Named StorageConnectionError to avoid shadowing the builtin ConnectionError.
    """

    def __init__(self, endpoint: str, cause: Exception | None = None):
        details = {"endpoint": endpoint}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Connection failed to {endpoint}", details)
        self.endpoint = endpoint
        self.cause = cause


class AuthenticationError(SyncStorageError):
    """Raised when a remote store rejects our credentials."""

    def __init__(self, endpoint: str, reason: str | None = None):
        details = {"endpoint": endpoint}
        if reason:
            details["reason"] = reason
        super().__init__(f"Authentication failed for {endpoint}", details)
        self.endpoint = endpoint
        self.reason = reason


class RemoteResponseError(SyncStorageError):
    """Raised when a remote store answers with a non-success status."""

    def __init__(self, endpoint: str, status: int, body: str | None = None):
        details: dict = {"endpoint": endpoint, "status": status}
        if body:
            details["body"] = body[:500]
        super().__init__(f"Request to {endpoint} failed with status {status}", details)
        self.endpoint = endpoint
        self.status = status


class MalformedResponseError(SyncStorageError):
    """Raised when a remote body does not have the expected shape."""

    def __init__(self, endpoint: str, expected: str, received: str):
        details = {"endpoint": endpoint, "expected": expected, "received": received}
        super().__init__(
            f"Malformed response from {endpoint}: expected {expected}, got {received}",
            details,
        )
        self.endpoint = endpoint
        self.expected = expected
        self.received = received


class ValidationError(SyncStorageError):
    """Raised when record validation fails."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value
