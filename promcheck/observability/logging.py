"""
Structured Logging for promcheck checks
structlog on top of stdlib logging, rendered for a terminal or as JSON lines
"""

import logging
import sys
from typing import Any

import structlog

# Libraries that log every request or docker API call at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "docker", "urllib3", "testcontainers")


def configure_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    Configure structlog for a check run

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("console" or "json")
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_check_context(group: str, config: str) -> None:
    """
    Bind the check being run to every following log line

    Args:
        group: Configuration group name
        config: Path of the configuration file
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(group=group, config=config)


def log_check_result(
    logger: structlog.stdlib.BoundLogger,
    checker: str,
    passed: bool,
    message: str = "",
    **kwargs: Any,
) -> None:
    """
    Log the outcome of one checker

    Passing checkers log at debug, failing ones at warning with the message.

    Args:
        logger: Structlog logger
        checker: Checker description
        passed: Whether the checker passed
        message: Failure message
        **kwargs: Additional context fields
    """
    if passed:
        logger.debug("checker_passed", checker=checker, **kwargs)
    else:
        logger.warning("checker_failed", checker=checker, message=message, **kwargs)
