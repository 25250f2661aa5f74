"""Structured logging for dualschema.

Every module logs through structlog under the ``dualschema`` namespace.
Libraries embedding the compiler keep their own logging setup; the CLI
and applications that want dualschema's output call ``configure_logging``
or ``configure_from_settings`` once at startup.
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from dualschema.config import CompilerSettings

LOGGER_NAME = "dualschema"

_logger: BoundLogger | None = None


def get_logger() -> BoundLogger:
    """Get the package logger, creating it if necessary.

    Example:
        >>> get_logger().info("registry_frozen", schemas=3)
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(LOGGER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def _processors(json_format: bool, add_timestamp: bool) -> list[Any]:
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Route dualschema's structlog events to a stream.

    Only the ``dualschema`` logger hierarchy is configured; the root
    logger is left alone.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render JSON lines instead of console output.
        add_timestamp: Add an ISO timestamp to each event.
        stream: Destination stream. Defaults to stderr.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    structlog.configure(
        processors=_processors(json_format, add_timestamp),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers = [handler]
    package_logger.setLevel(log_level.upper())
    package_logger.propagate = False


def configure_from_settings(settings: CompilerSettings) -> None:
    """Configure logging from ``log_level`` and ``json_logs``."""
    configure_logging(log_level=settings.log_level, json_format=settings.json_logs)
