"""Shared fixtures for cachestore tests."""

from __future__ import annotations

import io
from pathlib import Path

import paramiko
import pytest

from cachestore.backends.file_backend import FileSystemBackend
from cachestore.core.config import FileSystemConfig


@pytest.fixture(scope="session")
def rsa_key() -> paramiko.RSAKey:
    """One RSA key per test session, used as client key and as host key."""
    return paramiko.RSAKey.generate(2048)


@pytest.fixture(scope="session")
def rsa_key_pem(rsa_key: paramiko.RSAKey) -> str:
    buf = io.StringIO()
    rsa_key.write_private_key(buf)
    return buf.getvalue()


@pytest.fixture(scope="session")
def encrypted_rsa_key_pem(rsa_key: paramiko.RSAKey) -> str:
    buf = io.StringIO()
    rsa_key.write_private_key(buf, password="s3cret")
    return buf.getvalue()


@pytest.fixture()
def cache_root(tmp_path: Path) -> Path:
    root = tmp_path / "cache"
    root.mkdir()
    return root


@pytest.fixture()
def fs_config(cache_root: Path) -> FileSystemConfig:
    return FileSystemConfig(cache_root=str(cache_root))


@pytest.fixture()
def fs_backend(cache_root: Path) -> FileSystemBackend:
    return FileSystemBackend(cache_root)
