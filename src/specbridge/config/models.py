"""Configuration models for SpecBridge."""

from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__


class TransportType(StrEnum):
    """MCP server transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


class LogLevel(StrEnum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ServerConfig(BaseModel):
    """Server configuration."""

    name: str = Field(default="SpecBridge")
    host: str = Field(default="127.0.0.1")
    port: int | None = Field(default=None)
    transport: TransportType = Field(default=TransportType.STDIO)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int | None) -> int | None:
        """Validate server port range."""
        if v is not None and not 1 <= v <= 65535:
            raise ValueError("Server port must be between 1 and 65535")
        return v

    @model_validator(mode="after")
    def validate_network_transport(self) -> "ServerConfig":
        """Network transports need a port."""
        if self.transport != TransportType.STDIO and self.port is None:
            raise ValueError(f"A port is required when using the {self.transport} transport")
        return self


class SpecsConfig(BaseModel):
    """Description document discovery configuration."""

    path: Path = Field(default_factory=Path.cwd)
    extensions: list[str] = Field(default_factory=lambda: [".json", ".yaml", ".yml"])
    skip_files: list[str] = Field(
        default_factory=lambda: [
            "package.json",
            "package-lock.json",
            "tsconfig.json",
            ".eslintrc.json",
            "jest.config.json",
        ]
    )

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase extensions and make sure they start with a dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]


class HttpConfig(BaseModel):
    """Outbound HTTP configuration."""

    timeout: float = 30.0
    user_agent: str = f"specbridge/{__version__}"
    follow_redirects: bool = True

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Timeout must be positive."""
        if v <= 0:
            raise ValueError("HTTP timeout must be greater than zero")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    structured: bool = True
    format: str | None = None


class SpecBridgeConfig(BaseSettings):
    """Main SpecBridge configuration with file and environment support."""

    model_config = SettingsConfigDict(
        env_prefix="SPECBRIDGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    specs: SpecsConfig = Field(default_factory=SpecsConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml_file(
        cls, file_path: Path, overrides: dict[str, Any] | None = None
    ) -> "SpecBridgeConfig":
        """Create configuration from YAML file with optional overrides.

        Args:
            file_path: Path to YAML configuration file
            overrides: Optional dictionary of override values

        Returns:
            Validated configuration instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If config file is invalid YAML
            ValidationError: If configuration is invalid
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        try:
            with file_path.open("r", encoding="utf-8") as f:
                file_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {file_path}: {e}")

        return cls(**_apply_overrides(file_data, overrides))

    @classmethod
    def create(
        cls,
        config_path: Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> "SpecBridgeConfig":
        """Create configuration from file and environment with overrides.

        Args:
            config_path: Optional path to configuration file
            overrides: Optional settings to override

        Returns:
            Validated SpecBridge configuration
        """
        if config_path:
            return cls.from_yaml_file(config_path, overrides)
        return cls(**_apply_overrides({}, overrides))


_SERVER_OVERRIDES = ("host", "port", "transport")


def _apply_overrides(
    data: dict[str, Any], overrides: dict[str, Any] | None
) -> dict[str, Any]:
    """Fold flat CLI overrides into nested configuration data."""
    if not overrides:
        return data

    if any(k in overrides for k in _SERVER_OVERRIDES):
        server_data = data.setdefault("server", {})
        for key in _SERVER_OVERRIDES:
            if key in overrides:
                server_data[key] = overrides[key]

    if "specs_path" in overrides:
        data.setdefault("specs", {})["path"] = overrides["specs_path"]

    return data
