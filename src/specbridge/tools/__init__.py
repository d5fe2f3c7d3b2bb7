"""Tool registry, argument validation and MCP tool wrapping."""

from .mcp_tool import OpenAPITool
from .models import RegisteredTool, ToolCollision
from .registry import ToolRegistry
from .schema import SchemaKind, SchemaRule, build_arguments_model, classify

__all__ = [
    "OpenAPITool",
    "RegisteredTool",
    "SchemaKind",
    "SchemaRule",
    "ToolCollision",
    "ToolRegistry",
    "build_arguments_model",
    "classify",
]
