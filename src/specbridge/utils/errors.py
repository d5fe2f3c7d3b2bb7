"""Error types shared across SpecBridge."""

from pathlib import Path


class SpecBridgeError(Exception):
    """Base error for SpecBridge."""


class ConfigurationError(SpecBridgeError):
    """Configuration is contradictory or incomplete."""


class DocumentParseError(SpecBridgeError):
    """A description document could not be read or parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = Path(path)
        self.reason = reason
