"""Logging configuration and utilities."""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

from ..config.models import LoggingConfig


def setup_logging(config: LoggingConfig) -> FilteringBoundLogger:
    """Set up structured logging.

    Logs are written to stderr: with the stdio transport, stdout carries
    the MCP protocol stream.

    Args:
        config: Logging configuration

    Returns:
        Configured logger
    """
    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format or "%(message)s",
        stream=sys.stderr,
    )

    if config.structured:
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_log_level,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

    return structlog.get_logger("specbridge")


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name

    Returns:
        Logger instance
    """
    if name:
        return structlog.get_logger(f"specbridge.{name}")
    return structlog.get_logger("specbridge")
