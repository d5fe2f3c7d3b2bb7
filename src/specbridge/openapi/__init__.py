"""OpenAPI description loading and compilation."""

from .apisguru import apis_guru_spec
from .models import (
    CompileResult,
    CompileStatus,
    HttpMethod,
    ParameterLocation,
    ParameterSpec,
    ParsedSpec,
    ToolDefinition,
)
from .parser import (
    generate_tool_name,
    generate_tools,
    get_api_name,
    is_description_file,
    parse_openapi_spec,
)

__all__ = [
    "CompileResult",
    "CompileStatus",
    "HttpMethod",
    "ParameterLocation",
    "ParameterSpec",
    "ParsedSpec",
    "ToolDefinition",
    "apis_guru_spec",
    "generate_tool_name",
    "generate_tools",
    "get_api_name",
    "is_description_file",
    "parse_openapi_spec",
]
