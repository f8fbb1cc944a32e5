"""Nested pydantic-settings configuration for cache storage backends.

Each backend group reads its own ``CACHESTORE_<GROUP>_*`` env vars::

    export CACHESTORE_BACKEND=s3
    export CACHESTORE_S3_BUCKET=build-cache
    export CACHESTORE_S3_ENDPOINT=https://minio.internal:9000

Configs are frozen once constructed. Type and enum checks run here;
semantic checks (missing bucket, unusable cache root, missing auth) run in
the backend initializers and raise :class:`~cachestore.exceptions.ConfigError`.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings

S3ACL = Literal[
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
]

S3Encryption = Literal["", "AES256", "aws:kms"]


class S3Config(BaseSettings):
    """Object storage (AWS S3 / MinIO) backend configuration.

    Env vars use ``CACHESTORE_S3_`` prefix.
    """

    model_config = {"env_prefix": "CACHESTORE_S3_", "frozen": True}

    bucket: str = ""
    prefix: str = ""
    acl: S3ACL = "private"
    encryption: S3Encryption = ""
    kms_key_id: str = ""
    endpoint: str = ""
    region: str = "us-east-1"
    access_key: str = ""
    secret_key: SecretStr = SecretStr("")
    # True for MinIO and most self-hosted endpoints, False for AWS
    path_style: bool = False

    @property
    def use_ssl(self) -> bool:
        """TLS follows the endpoint scheme; the AWS default endpoint is always HTTPS."""
        if not self.endpoint:
            return True
        return self.endpoint.startswith("https://")

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key.get_secret_value())


class FileSystemConfig(BaseSettings):
    """Local filesystem backend configuration.

    Env vars use ``CACHESTORE_FS_`` prefix.
    """

    model_config = {"env_prefix": "CACHESTORE_FS_", "frozen": True}

    cache_root: str = ""


class SFTPConfig(BaseSettings):
    """SFTP (SSH file transfer) backend configuration.

    Env vars use ``CACHESTORE_SFTP_`` prefix. ``private_key`` holds the key
    material itself, not a path. Host identity is verified against
    ``host_key`` when pinned, otherwise against ``known_hosts_file`` or the
    system known_hosts. ``insecure_ignore_host_key`` disables verification
    and must be opted into explicitly.
    """

    model_config = {"env_prefix": "CACHESTORE_SFTP_", "frozen": True}

    hostname: str = ""
    port: int = Field(default=22, ge=1, le=65535)
    username: str = ""
    password: SecretStr = SecretStr("")
    private_key: SecretStr = SecretStr("")
    key_passphrase: SecretStr = SecretStr("")
    timeout: float = Field(default=30.0, gt=0.0)
    host_key: str = ""
    known_hosts_file: str = ""
    insecure_ignore_host_key: bool = False

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Env vars use ``CACHESTORE_OBSERVABILITY_`` prefix. ``json_logs`` left
    unset picks JSON lines when stderr is not a terminal.
    """

    model_config = {"env_prefix": "CACHESTORE_OBSERVABILITY_"}

    log_level: str = "INFO"
    json_logs: bool | None = None


class CacheStoreSettings(BaseSettings):
    """Top-level settings: which backend to build plus every backend group.

    Each sub-config reads its own ``CACHESTORE_<GROUP>_*`` env vars.
    """

    model_config = {"env_prefix": "CACHESTORE_"}

    backend: Literal["s3", "filesystem", "sftp"] = "filesystem"
    debug: bool = False
    s3: S3Config = Field(default_factory=S3Config)
    filesystem: FileSystemConfig = Field(default_factory=FileSystemConfig)
    sftp: SFTPConfig = Field(default_factory=SFTPConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
