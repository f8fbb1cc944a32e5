"""S3 storage backend — stores cache objects in an S3 (or MinIO) bucket."""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

from botocore.exceptions import BotoCoreError, ClientError

from cachestore.backends.protocols import ClosingBackendMixin
from cachestore.exceptions import NotFoundError, TransportError

log = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3Backend(ClosingBackendMixin):
    """Stores objects under ``prefix`` in ``bucket``.

    Each call is an independent request on a boto3 client, so one instance
    can be shared between threads.
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        prefix: str = "",
        acl: str = "private",
        encryption: str = "",
        kms_key_id: str = "",
    ) -> None:
        self._s3 = client
        self._bucket = bucket
        self._prefix = prefix.strip("/")
        self._acl = acl
        self._encryption = encryption
        self._kms_key_id = kms_key_id

    def _full_key(self, key: str) -> str:
        key = key.lstrip("/")
        return f"{self._prefix}/{key}" if self._prefix else key

    def get(self, key: str) -> BinaryIO:
        full_key = self._full_key(key)
        try:
            response = self._s3.get_object(Bucket=self._bucket, Key=full_key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                raise NotFoundError(
                    f"Not found in S3: s3://{self._bucket}/{full_key}", operation="get", key=key
                ) from e
            raise _transport_error("get", key, e) from e
        except BotoCoreError as e:
            raise TransportError(f"could not get the object: {e}", operation="get", key=key) from e
        return response["Body"]

    def put(self, key: str, source: BinaryIO) -> None:
        full_key = self._full_key(key)
        put_kwargs: dict[str, Any] = {
            "Bucket": self._bucket,
            "Key": full_key,
            "Body": source,
            "ACL": self._acl,
        }
        if self._encryption:
            put_kwargs["ServerSideEncryption"] = self._encryption
            if self._encryption == "aws:kms" and self._kms_key_id:
                put_kwargs["SSEKMSKeyId"] = self._kms_key_id

        try:
            self._s3.put_object(**put_kwargs)
        except ClientError as e:
            raise _transport_error("put", key, e) from e
        except BotoCoreError as e:
            raise TransportError(f"could not put the object: {e}", operation="put", key=key) from e
        log.debug("Saved %s to s3://%s/%s", key, self._bucket, full_key)

    def close(self) -> None:
        close = getattr(self._s3, "close", None)
        if close is not None:
            close()


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _transport_error(operation: str, key: str, error: ClientError) -> TransportError:
    """Turn a non-success S3 response into a TransportError keeping status and message."""
    details = error.response.get("Error", {})
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    message = details.get("Message") or str(error)
    return TransportError(
        f"could not {operation} the object: {details.get('Code', 'Unknown')} "
        f"(status {status}): {message}",
        operation=operation,
        key=key,
        status_code=status,
    )
