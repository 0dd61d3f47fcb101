"""Structured logging configuration.

This module routes structlog events through stdlib logging so every
module logger shares one JSON format. Entry points call
``configure_logging`` once; package loggers carry a NullHandler so library
use without it does not fall back to raw stderr output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

_SHARED_PROCESSORS: list[Any] = [
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]

structlog.configure(
    processors=[*_SHARED_PROCESSORS, ProcessorFormatter.wrap_for_formatter],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=False,
)

for _package_name in ("cli", "core", "store"):
    logging.getLogger(_package_name).addHandler(logging.NullHandler())


def configure_logging(level: str = "INFO") -> None:
    """Install a JSON stderr handler on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[
                ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        Bound structlog logger.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
