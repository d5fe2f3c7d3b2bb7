"""Compiled tool representation of OpenAPI operations."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_BASE_URL = "https://api.example.com"


class HttpMethod(StrEnum):
    """Operation methods that compile into tools, in document scan order."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class ParameterLocation(StrEnum):
    """Where a parameter is carried in the HTTP request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class ParameterSpec(BaseModel):
    """A single operation parameter with its raw schema fragment."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    location: ParameterLocation
    required: bool = False
    schema_: Any = Field(default=None, alias="schema")
    description: str | None = None


class ToolDefinition(BaseModel):
    """One HTTP operation compiled into a callable tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    method: HttpMethod
    path: str
    base_url: str
    operation_id: str | None = None
    parameters: tuple[ParameterSpec, ...] = ()
    request_body: Any = None
    responses: Any = None
    security: Any = None

    @property
    def has_request_body(self) -> bool:
        """Whether the operation declares a request body."""
        return self.request_body is not None

    def parameters_in(self, location: ParameterLocation) -> list[ParameterSpec]:
        """Parameters declared for a request location, in document order."""
        return [p for p in self.parameters if p.location == location]

    @property
    def parameter_names(self) -> set[str]:
        """Names of all declared parameters."""
        return {p.name for p in self.parameters}


@dataclass(slots=True)
class ParsedSpec:
    """A compiled description document."""

    api_name: str
    file_path: Path
    document: dict[str, Any]
    tools: list[ToolDefinition] = field(default_factory=list)

    @property
    def base_url(self) -> str | None:
        """Base URL shared by the document's tools."""
        return self.tools[0].base_url if self.tools else None


class CompileStatus(StrEnum):
    """Outcome of compiling a candidate file."""

    COMPILED = "compiled"
    NOT_APPLICABLE = "not_applicable"
    PARSE_FAILED = "parse_failed"


@dataclass(slots=True)
class CompileResult:
    """Result of compiling one candidate file."""

    status: CompileStatus
    file_path: Path
    spec: ParsedSpec | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether tools were produced."""
        return self.status == CompileStatus.COMPILED
