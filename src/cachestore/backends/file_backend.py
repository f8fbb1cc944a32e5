"""Filesystem storage backend — cache objects as files under a local root."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO

from cachestore.backends.protocols import ClosingBackendMixin
from cachestore.exceptions import DirectoryCreationError, NotFoundError, TransportError

log = logging.getLogger(__name__)


class FileSystemBackend(ClosingBackendMixin):
    """Stores each key as a file below ``root``.

    The root is validated once by
    :func:`~cachestore.backends.factory.initialize_filesystem_backend`.
    Writes truncate in place, so a crash mid-``put`` can leave a partial file.
    Keys that normalize to a path outside ``root`` are refused.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _key_path(self, key: str, operation: str) -> Path:
        root = os.path.normpath(self._root)
        path = os.path.normpath(os.path.join(root, key.lstrip("/")))
        if os.path.commonpath([root, path]) != root:
            raise TransportError(f"key {key!r} resolves outside of {root}", operation=operation, key=key)
        return Path(path)

    def get(self, key: str) -> BinaryIO:
        path = self._key_path(key, "get")
        try:
            return path.open("rb")
        except FileNotFoundError as e:
            raise NotFoundError(f"Not found: {key} (path: {path})", operation="get", key=key) from e
        except OSError as e:
            raise TransportError(f"could not read {path}: {e}", operation="get", key=key) from e

    def put(self, key: str, source: BinaryIO) -> None:
        path = self._key_path(key, "put")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(
                f"could not create directory <{path.parent}>: {e}",
                path=str(path.parent),
                key=key,
            ) from e

        try:
            with path.open("wb") as dst:
                shutil.copyfileobj(source, dst)
        except OSError as e:
            raise TransportError(f"could not write {path}: {e}", operation="put", key=key) from e
        log.debug("Stored %s at %s", key, path)
