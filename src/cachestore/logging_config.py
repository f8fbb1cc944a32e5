"""Route cachestore, botocore and paramiko log records through structlog.

The backends only ever log through stdlib ``logging`` and never configure it,
so an application calls :func:`setup_logging` once at startup with the
``CACHESTORE_OBSERVABILITY_*`` settings. Records from the storage client
libraries share the same handler and renderer as cachestore's own.

Output is JSON when ``json_logs`` is set, or when it is unset and stderr is
not a terminal; otherwise structlog's console renderer is used. The client
libraries are held at WARNING or above unless the configured level is DEBUG.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from cachestore.core.config import ObservabilityConfig

_CLIENT_LOGGERS = ("botocore", "boto3", "urllib3", "paramiko")


def setup_logging(config: ObservabilityConfig) -> None:
    """Configure structured logging for the root logger."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    json_logs = config.json_logs if config.json_logs is not None else not sys.stderr.isatty()
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("cachestore").setLevel(level)
    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else max(level, logging.WARNING))
