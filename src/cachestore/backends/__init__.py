"""Pluggable storage backends for build cache archives."""

from __future__ import annotations

from cachestore.backends.factory import (
    create_backend,
    initialize_filesystem_backend,
    initialize_s3_backend,
    initialize_sftp_backend,
)
from cachestore.backends.file_backend import FileSystemBackend
from cachestore.backends.protocols import IStorageBackend
from cachestore.backends.s3_backend import S3Backend
from cachestore.backends.sftp_backend import SFTPBackend

__all__ = [
    "IStorageBackend",
    "FileSystemBackend",
    "S3Backend",
    "SFTPBackend",
    "create_backend",
    "initialize_filesystem_backend",
    "initialize_s3_backend",
    "initialize_sftp_backend",
]
