"""Exception hierarchy for cachestore."""

from __future__ import annotations


class CacheStoreError(Exception):
    """Base exception for all cachestore errors."""


class ConfigError(CacheStoreError):
    """Invalid or insufficient backend configuration, detected before any I/O."""


class BackendConnectionError(CacheStoreError):
    """Raised when a remote session cannot be established or authenticated."""

    def __init__(self, message: str, address: str = "") -> None:
        super().__init__(message)
        self.address = address


class StorageOperationError(CacheStoreError):
    """A ``get``/``put`` on an established backend failed."""

    def __init__(self, message: str, *, operation: str = "", key: str = "") -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key


class NotFoundError(StorageOperationError):
    """No object exists at the requested key (a cache miss)."""


class TransportError(StorageOperationError):
    """I/O failure while reading or writing an object."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        key: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, operation=operation, key=key)
        self.status_code = status_code


class DirectoryCreationError(TransportError):
    """Parent directories for a key could not be created before writing."""

    def __init__(self, message: str, *, path: str, operation: str = "put", key: str = "") -> None:
        super().__init__(message, operation=operation, key=key)
        self.path = path


__all__ = [
    "CacheStoreError",
    "ConfigError",
    "BackendConnectionError",
    "StorageOperationError",
    "NotFoundError",
    "TransportError",
    "DirectoryCreationError",
]
