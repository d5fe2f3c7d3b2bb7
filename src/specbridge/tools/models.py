"""Registry data models."""

from dataclasses import dataclass
from pathlib import Path

from ..openapi.models import ToolDefinition


@dataclass(slots=True, frozen=True)
class RegisteredTool:
    """Tool definition together with the namespace it authenticates as."""

    api_name: str
    source: Path
    definition: ToolDefinition

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass(slots=True, frozen=True)
class ToolCollision:
    """Two registrations under one tool name; the replacement wins."""

    name: str
    previous: RegisteredTool
    replacement: RegisteredTool
