"""Tests for settings-driven backend selection."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

from cachestore.backends.factory import create_backend
from cachestore.backends.file_backend import FileSystemBackend
from cachestore.core.config import CacheStoreSettings, FileSystemConfig, S3Config, SFTPConfig


class TestCreateBackend:
    def test_filesystem(self, cache_root: Path) -> None:
        settings = CacheStoreSettings(
            backend="filesystem",
            filesystem=FileSystemConfig(cache_root=str(cache_root)),
        )
        backend = create_backend(settings)
        assert isinstance(backend, FileSystemBackend)
        assert backend.root == cache_root

    def test_s3_passes_config_and_debug(self) -> None:
        sentinel: Any = object()
        s3 = S3Config(bucket="b")
        settings = CacheStoreSettings(backend="s3", debug=True, s3=s3)
        with patch("cachestore.backends.factory.initialize_s3_backend", return_value=sentinel) as init:
            assert create_backend(settings) is sentinel
        init.assert_called_once_with(s3, debug=True)

    def test_sftp_passes_config_and_debug(self) -> None:
        sentinel: Any = object()
        sftp = SFTPConfig(hostname="h", username="u", password="p")
        settings = CacheStoreSettings(backend="sftp", sftp=sftp)
        with patch("cachestore.backends.factory.initialize_sftp_backend", return_value=sentinel) as init:
            assert create_backend(settings) is sentinel
        init.assert_called_once_with(sftp, debug=False)
