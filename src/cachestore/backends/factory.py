"""Backend initializers that turn a config into a connected, ready backend.

Each initializer validates its config eagerly, acquires whatever client or
session the backend needs and returns the backend, or raises:

- :class:`ConfigError` for invalid/insufficient configuration (no I/O done),
- :class:`BackendConnectionError` when a remote session cannot be opened.

Anything acquired before a failing step is released before the error is
raised. No state is kept at module level.
"""

from __future__ import annotations

import io
import logging
import os
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import boto3
import paramiko
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError
from paramiko.hostkeys import HostKeyEntry, InvalidHostKey

from cachestore.backends.file_backend import FileSystemBackend
from cachestore.backends.s3_backend import S3Backend
from cachestore.backends.sftp_backend import SFTPBackend
from cachestore.exceptions import BackendConnectionError, ConfigError

if TYPE_CHECKING:
    from cachestore.backends.protocols import IStorageBackend
    from cachestore.core.config import CacheStoreSettings, FileSystemConfig, S3Config, SFTPConfig

log = logging.getLogger(__name__)

# Tried in order when parsing private key material
_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


def initialize_s3_backend(
    config: S3Config,
    *,
    debug: bool = False,
    session: Any = None,
) -> S3Backend:
    """Create an S3 backend.

    Without a static key pair the client uses the session's default
    credential chain (env, profile, instance role); when that chain resolves
    nothing, requests are sent unsigned for anonymous access. Either way a
    warning is logged and initialization proceeds.

    Args:
        config: Object storage configuration.
        debug: Log the (redacted) configuration and turn on botocore's
            request/response logging.
        session: A ``boto3.session.Session``-like object; a fresh session
            is created when omitted.

    Raises:
        ConfigError: No bucket configured, or the client cannot be built
            from the endpoint/region given.
    """
    if not config.bucket.strip():
        raise ConfigError("S3 bucket is required (set CACHESTORE_S3_BUCKET)")

    if debug:
        log.debug("s3 backend config: %r", config)
        boto3.set_stream_logger("botocore", logging.DEBUG)

    session = session if session is not None else boto3.session.Session()
    client_kwargs: dict[str, Any] = {
        "region_name": config.region,
        "use_ssl": config.use_ssl,
    }
    if config.endpoint:
        client_kwargs["endpoint_url"] = _endpoint_url(config.endpoint)

    botocore_kwargs: dict[str, Any] = {
        "s3": {"addressing_style": "path" if config.path_style else "auto"},
        "retries": {"total_max_attempts": 1},
    }

    if config.has_static_credentials:
        client_kwargs["aws_access_key_id"] = config.access_key
        client_kwargs["aws_secret_access_key"] = config.secret_key.get_secret_value()
    else:
        log.warning(
            "aws key and/or secret not provided (falling back to default/anonymous credentials)"
        )
        if session.get_credentials() is None:
            botocore_kwargs["signature_version"] = UNSIGNED

    client_kwargs["config"] = Config(**botocore_kwargs)

    try:
        client = session.client("s3", **client_kwargs)
    except (BotoCoreError, ValueError) as e:
        raise ConfigError(f"could not create S3 client for <{config.endpoint or config.region}>: {e}") from e

    log.info("S3 backend ready for bucket %s", config.bucket)
    return S3Backend(
        client,
        config.bucket,
        prefix=config.prefix,
        acl=config.acl,
        encryption=config.encryption,
        kms_key_id=config.kms_key_id,
    )


def initialize_filesystem_backend(config: FileSystemConfig, *, debug: bool = False) -> FileSystemBackend:
    """Create a filesystem backend after checking the cache root is usable.

    Raises:
        ConfigError: The root is empty or ``/``, missing, not a directory,
            or not readable and writable.
    """
    root = config.cache_root.strip()
    if not root or posixpath.normpath(root).rstrip("/") == "":
        raise ConfigError(f"could not use <{config.cache_root}> as cache root, empty or root path given")

    path = Path(root)
    try:
        path.stat()
    except OSError as e:
        raise ConfigError(f"could not use <{root}> as cache root, make sure volume is mounted") from e

    if not path.is_dir():
        raise ConfigError(f"could not use <{root}> as cache root, not a directory")
    if not os.access(path, os.R_OK | os.W_OK | os.X_OK):
        raise ConfigError(f"could not use <{root}> as cache root, permission denied")

    if debug:
        log.debug("filesystem backend config: %r", config)

    log.info("Filesystem backend ready at %s", path)
    return FileSystemBackend(path)


def initialize_sftp_backend(
    config: SFTPConfig,
    *,
    debug: bool = False,
    client_factory: Callable[[], Any] = paramiko.SSHClient,
) -> SFTPBackend:
    """Connect, authenticate and open an SFTP session.

    Steps run in order: build credentials, set the host key policy, connect
    and authenticate, open the SFTP subsystem. Both password and key are
    offered when both are configured.

    Args:
        config: SFTP configuration.
        debug: Log the (redacted) configuration.
        client_factory: Builds the SSH client; ``paramiko.SSHClient`` by default.

    Raises:
        ConfigError: Missing host, user or credentials; unparsable private
            key or pinned host key; unreadable known_hosts file.
        BackendConnectionError: Connection, host verification,
            authentication or SFTP negotiation failed.
    """
    if not config.hostname:
        raise ConfigError("SFTP hostname is required")
    if not config.username:
        raise ConfigError("SFTP username is required")

    password = config.password.get_secret_value() or None
    pkey = _load_private_key(config) if config.private_key.get_secret_value() else None
    if password is None and pkey is None:
        raise ConfigError("SFTP requires a password or a private key")

    pinned = _parse_host_key(config) if config.host_key else None

    if debug:
        log.debug("sftp backend config: %r", config)

    client = client_factory()
    try:
        _configure_host_keys(client, config, pinned)
    except OSError as e:
        client.close()
        raise ConfigError(f"could not load known hosts from <{config.known_hosts_file}>") from e

    address = config.address
    try:
        client.connect(
            config.hostname,
            port=config.port,
            username=config.username,
            password=password,
            pkey=pkey,
            timeout=config.timeout,
            banner_timeout=config.timeout,
            auth_timeout=config.timeout,
            allow_agent=False,
            look_for_keys=False,
        )
    except (OSError, paramiko.SSHException) as e:
        client.close()
        raise BackendConnectionError(f"could not connect server <{address}>: {e}", address=address) from e

    try:
        sftp = client.open_sftp()
    except (OSError, paramiko.SSHException) as e:
        client.close()
        raise BackendConnectionError(f"could not initialize sFTP client on <{address}>: {e}", address=address) from e

    log.info("SFTP backend ready on %s as %s", address, config.username)
    return SFTPBackend(sftp, client)


def create_backend(settings: CacheStoreSettings) -> IStorageBackend:
    """Build the backend selected by ``settings.backend``."""
    if settings.backend == "s3":
        return initialize_s3_backend(settings.s3, debug=settings.debug)
    if settings.backend == "sftp":
        return initialize_sftp_backend(settings.sftp, debug=settings.debug)
    if settings.backend == "filesystem":
        return initialize_filesystem_backend(settings.filesystem, debug=settings.debug)
    raise ConfigError(f"unknown backend {settings.backend!r}")


def _endpoint_url(endpoint: str) -> str:
    # botocore rejects a bare host:port; no scheme means plain HTTP
    if "://" in endpoint:
        return endpoint
    return f"http://{endpoint}"


def _load_private_key(config: SFTPConfig) -> paramiko.PKey:
    material = config.private_key.get_secret_value()
    passphrase = config.key_passphrase.get_secret_value() or None
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(material), password=passphrase)
        except paramiko.PasswordRequiredException as e:
            raise ConfigError("could not parse private key: key is encrypted, set key_passphrase") from e
        except (paramiko.SSHException, ValueError):
            continue
    raise ConfigError("could not parse private key")


def _host_key_name(config: SFTPConfig) -> str:
    # Same host naming paramiko uses when it looks up server keys
    if config.port == 22:
        return config.hostname
    return f"[{config.hostname}]:{config.port}"


def _parse_host_key(config: SFTPConfig) -> paramiko.PKey:
    try:
        entry = HostKeyEntry.from_line(f"{_host_key_name(config)} {config.host_key.strip()}")
    except (paramiko.SSHException, InvalidHostKey, ValueError) as e:
        raise ConfigError(f"could not parse pinned host key: {e}") from e
    if entry is None or entry.key is None:
        raise ConfigError("could not parse pinned host key: expected '<type> <base64>'")
    return entry.key


def _configure_host_keys(client: Any, config: SFTPConfig, pinned: paramiko.PKey | None) -> None:
    if pinned is not None:
        client.get_host_keys().add(_host_key_name(config), pinned.get_name(), pinned)
        client.set_missing_host_key_policy(paramiko.RejectPolicy())
        return

    if config.insecure_ignore_host_key:
        log.warning(
            "INSECURE: host key verification disabled for %s; any server key is accepted",
            config.address,
        )
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        return

    client.load_system_host_keys(config.known_hosts_file or None)
    client.set_missing_host_key_policy(paramiko.RejectPolicy())
