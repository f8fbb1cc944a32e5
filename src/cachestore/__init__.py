"""cachestore: one get/put contract over S3, local filesystem and SFTP storage.

Usage::

    from cachestore import FileSystemConfig, initialize_filesystem_backend

    backend = initialize_filesystem_backend(FileSystemConfig(cache_root="/cache"))
    with open("archive.tar", "rb") as src:
        backend.put("repo/branch/archive.tar", src)
    with backend.get("repo/branch/archive.tar") as stream:
        data = stream.read()
"""

from __future__ import annotations

from cachestore.backends import (
    FileSystemBackend,
    IStorageBackend,
    S3Backend,
    SFTPBackend,
    create_backend,
    initialize_filesystem_backend,
    initialize_s3_backend,
    initialize_sftp_backend,
)
from cachestore.core.config import (
    CacheStoreSettings,
    FileSystemConfig,
    ObservabilityConfig,
    S3Config,
    SFTPConfig,
)
from cachestore.exceptions import (
    BackendConnectionError,
    CacheStoreError,
    ConfigError,
    DirectoryCreationError,
    NotFoundError,
    StorageOperationError,
    TransportError,
)
from cachestore.logging_config import setup_logging

__all__ = [
    # Contract and backends
    "IStorageBackend",
    "S3Backend",
    "FileSystemBackend",
    "SFTPBackend",
    # Initializers
    "initialize_s3_backend",
    "initialize_filesystem_backend",
    "initialize_sftp_backend",
    "create_backend",
    # Configuration
    "CacheStoreSettings",
    "S3Config",
    "FileSystemConfig",
    "SFTPConfig",
    "ObservabilityConfig",
    "setup_logging",
    # Errors
    "CacheStoreError",
    "ConfigError",
    "BackendConnectionError",
    "StorageOperationError",
    "NotFoundError",
    "TransportError",
    "DirectoryCreationError",
]
