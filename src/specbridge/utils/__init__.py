"""Utility functions and helpers."""

from .errors import ConfigurationError, DocumentParseError, SpecBridgeError
from .logging import get_logger, setup_logging

__all__ = [
    # Error handling
    "ConfigurationError",
    "DocumentParseError",
    "SpecBridgeError",
    # Logging
    "get_logger",
    "setup_logging",
]
