"""MCP server data models."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(slots=True)
class SpecFileInfo:
    """A description file found in the specs directory."""

    filename: str
    path: Path
    size_kb: float
    modified: datetime
    extension: str
