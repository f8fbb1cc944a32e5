"""SFTP storage backend — cache objects on a remote host over one SSH session."""

from __future__ import annotations

import logging
import posixpath
import shutil
import threading
from typing import Any, BinaryIO

from paramiko import SSHException

from cachestore.backends.protocols import ClosingBackendMixin
from cachestore.exceptions import DirectoryCreationError, NotFoundError, TransportError

log = logging.getLogger(__name__)

_SFTP_ERRORS = (OSError, SSHException)


class SFTPBackend(ClosingBackendMixin):
    """Stores objects as remote files, keys relative to the session's working directory.

    The backend owns one SFTP channel and the SSH client beneath it. ``get``
    and ``put`` on the same instance are serialized; streams returned by
    ``get`` read through paramiko's channel, which serializes its own
    requests.
    """

    def __init__(self, sftp: Any, ssh_client: Any = None) -> None:
        self._sftp = sftp
        self._ssh = ssh_client
        self._lock = threading.Lock()
        self._closed = False

    def get(self, key: str) -> BinaryIO:
        with self._lock:
            try:
                self._sftp.stat(key)
                return self._sftp.open(key, "rb")
            except FileNotFoundError as e:
                raise NotFoundError(f"Not found on remote server: {key}", operation="get", key=key) from e
            except _SFTP_ERRORS as e:
                raise TransportError(f"could not get the object: {e}", operation="get", key=key) from e

    def put(self, key: str, source: BinaryIO) -> None:
        with self._lock:
            self._ensure_dir(key)
            try:
                with self._sftp.open(key, "wb") as dst:
                    shutil.copyfileobj(source, dst)
            except _SFTP_ERRORS as e:
                raise TransportError(f"could not put the object: {e}", operation="put", key=key) from e
        log.debug("Uploaded %s", key)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._sftp.close()
        finally:
            if self._ssh is not None:
                self._ssh.close()

    def _ensure_dir(self, key: str) -> None:
        directory = posixpath.dirname(key)
        try:
            self._makedirs(directory)
        except _SFTP_ERRORS as e:
            raise DirectoryCreationError(
                f"could not create remote directory <{directory}>: {e}",
                path=directory,
                key=key,
            ) from e

    def _makedirs(self, directory: str) -> None:
        if directory in ("", "/", "."):
            return
        try:
            self._sftp.stat(directory)
            return
        except FileNotFoundError:
            pass
        self._makedirs(posixpath.dirname(directory))
        self._sftp.mkdir(directory)
        log.debug("Created remote directory %s", directory)
