"""
Structured logging utilities for the attachment inliner.

This module configures structlog on top of the standard library logging so
that every module can log events with key/value context, rendered either as
JSON lines or as human readable console output.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog


def setup_logging(level: str = "INFO", structured: bool = True) -> None:
    """
    Set up logging configuration with structured logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        structured: Whether to render log events as JSON.

    Raises:
        ValueError: If the log level is invalid.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Log to stderr, stdout may carry NDJSON output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if structured:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structlog logger with the given name.

    Args:
        name: Logger name.

    Returns:
        Logger instance.
    """
    return structlog.get_logger(name)


def log_with_context(
    logger: Any,
    level: str,
    event: str,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an event with additional context.

    Args:
        logger: Logger instance.
        level: Log level (debug, info, warning, error, critical).
        event: Event name.
        extra: Additional context to include in the log.
    """
    log_method = getattr(logger, level.lower())
    log_method(event, **(extra or {}))
