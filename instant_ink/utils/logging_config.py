"""
Logging configuration for instant-ink.
Structured logging on stderr so that stdout carries only command output.
"""
import logging
import sys
from typing import Optional

import structlog

from instant_ink.utils.config import get_settings


def setup_logging(log_level: Optional[str] = None, verbose: bool = False) -> None:
    """Set up structured logging for the CLI.

    Args:
        log_level: Log level (debug, info, warning, error). If None, the
            configured settings value is used.
        verbose: Force debug level regardless of log_level.
    """
    if verbose:
        log_level = "DEBUG"
    elif log_level is None:
        log_level = get_settings().log_level

    level = getattr(logging, log_level.upper(), logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    # basicConfig is a no-op once handlers exist; the level must still follow --verbose
    logging.getLogger().setLevel(level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
