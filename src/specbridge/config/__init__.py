"""Configuration loading and management."""

from .models import (
    HttpConfig,
    LoggingConfig,
    ServerConfig,
    SpecBridgeConfig,
    SpecsConfig,
    TransportType,
)

__all__ = [
    "HttpConfig",
    "LoggingConfig",
    "ServerConfig",
    "SpecBridgeConfig",
    "SpecsConfig",
    "TransportType",
]
