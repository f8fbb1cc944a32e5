"""Storage backend protocol — defines the contract all backends implement."""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class IStorageBackend(Protocol):
    """Protocol for cache storage backends (S3, filesystem, SFTP).

    Keys are slash-separated paths relative to the backend's namespace:
    bucket prefix, cache root or SFTP working directory.
    """

    def get(self, key: str) -> BinaryIO:
        """Open the object at ``key`` for reading.

        The returned stream is positioned at the start of the object and
        must be closed by the caller.

        Raises:
            NotFoundError: No object exists at ``key``.
            TransportError: The read could not be started.
        """
        ...

    def put(self, key: str, source: BinaryIO) -> None:
        """Store ``source`` (current position to EOF) at ``key``.

        Replaces any existing object. ``source`` must be seekable.

        Raises:
            DirectoryCreationError: Parent directories could not be created.
            TransportError: The write failed.
        """
        ...

    def close(self) -> None:
        """Release the client or session owned by this backend."""
        ...


class ClosingBackendMixin:
    """Context-manager support for backends exposing ``close()``."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
