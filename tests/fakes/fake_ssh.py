"""In-memory fakes of paramiko's SSHClient and SFTPClient for testing."""

from __future__ import annotations

import errno
import io
import posixpath
from types import SimpleNamespace
from typing import Any

import paramiko


def _norm(path: str) -> str:
    path = posixpath.normpath(path)
    return "" if path == "." else path


class FakeSFTPFile(io.BytesIO):
    """Writable remote file; commits its contents to the server on close."""

    def __init__(self, server: FakeSFTPClient, path: str) -> None:
        super().__init__()
        self._server = server
        self._path = path
        server.open_handles += 1

    def write(self, data: Any) -> int:
        if self._server.fail_writes:
            raise OSError(errno.EIO, "Failure")
        return super().write(data)

    def close(self) -> None:
        if not self.closed:
            self._server.files[self._path] = self.getvalue()
            self._server.open_handles -= 1
        super().close()


class FakeSFTPClient:
    """Dict-backed SFTP server view: files map path -> bytes, dirs is a set."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()
        self.mkdir_calls: list[str] = []
        self.open_handles = 0
        self.fail_writes = False
        self.fail_mkdir = False
        self.stat_errors: dict[str, OSError] = {}
        self.closed = False

    def _exists_dir(self, path: str) -> bool:
        return path in ("", "/") or path in self.dirs

    def stat(self, path: str) -> SimpleNamespace:
        path = _norm(path)
        if path in self.stat_errors:
            raise self.stat_errors[path]
        if path in self.files:
            return SimpleNamespace(st_size=len(self.files[path]))
        if self._exists_dir(path):
            return SimpleNamespace(st_size=0)
        raise FileNotFoundError(errno.ENOENT, "No such file", path)

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        path = _norm(path)
        self.mkdir_calls.append(path)
        if self.fail_mkdir:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        if not self._exists_dir(posixpath.dirname(path)):
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        if path in self.dirs or path in self.files:
            raise OSError(errno.EEXIST, "Failure", path)
        self.dirs.add(path)

    def open(self, path: str, mode: str = "r") -> io.BytesIO:
        path = _norm(path)
        if "w" in mode:
            if not self._exists_dir(posixpath.dirname(path)):
                raise FileNotFoundError(errno.ENOENT, "No such file", path)
            return FakeSFTPFile(self, path)
        if path not in self.files:
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        return io.BytesIO(self.files[path])

    def close(self) -> None:
        self.closed = True


class FakeSSHClient:
    """Records the connection protocol and every close() call."""

    def __init__(
        self,
        *,
        connect_error: BaseException | None = None,
        sftp_error: BaseException | None = None,
    ) -> None:
        self.connect_error = connect_error
        self.sftp_error = sftp_error
        self.host_keys = paramiko.HostKeys()
        self.policy: Any = None
        self.system_host_keys_loaded: list[str | None] = []
        self.connect_kwargs: dict[str, Any] = {}
        self.sftp = FakeSFTPClient()
        self.close_calls = 0

    def get_host_keys(self) -> paramiko.HostKeys:
        return self.host_keys

    def load_system_host_keys(self, filename: str | None = None) -> None:
        if filename is not None and not posixpath.exists(filename):
            raise FileNotFoundError(errno.ENOENT, "No such file", filename)
        self.system_host_keys_loaded.append(filename)

    def set_missing_host_key_policy(self, policy: Any) -> None:
        self.policy = policy

    def connect(self, hostname: str, **kwargs: Any) -> None:
        self.connect_kwargs = {"hostname": hostname, **kwargs}
        if self.connect_error is not None:
            raise self.connect_error

    def open_sftp(self) -> FakeSFTPClient:
        if self.sftp_error is not None:
            raise self.sftp_error
        return self.sftp

    def close(self) -> None:
        self.close_calls += 1
