"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides JSON output for production and human-readable console output for
development, with the verbosity driven by the application settings.
"""

import logging
import sys

import structlog

from backoffice.core.config.settings import settings


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures the application's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level and logger name inclusion
    3. JSON formatting for production, console formatting for development
    4. Standard library logger factory, so third-party logs share the level
    5. Logger caching for performance
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_from_settings() -> None:
    """Configure logging from the application settings singleton."""
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)


# Create a singleton logger instance for the application
logger = structlog.get_logger()
