"""Structured logging configuration.

This module initializes a structlog logger with a stable JSON format
shared by the store, compute, and CLI layers. Rendered events are routed
through standard logging so handlers are resolved at emit time.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(name)


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a stderr handler to the root logger for entry points.

    Library code never calls this; applications and the CLI do. An
    existing root handler is left in place.

    Args:
        level: Minimum level emitted by the root logger.

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        # events are already rendered as JSON with timestamp and level
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)
    return root
