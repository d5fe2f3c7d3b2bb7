"""FastMCP tool backed by a compiled OpenAPI operation."""

from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import BaseModel, Field, ValidationError

from ..openapi.models import ToolDefinition
from .schema import build_arguments_model, tool_input_schema, validated_arguments

ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


class OpenAPITool(Tool):
    """MCP tool that validates its arguments and hands them to a handler."""

    definition: ToolDefinition = Field(exclude=True)
    arguments_model: type[BaseModel] = Field(exclude=True)
    handler: ToolHandler = Field(exclude=True)

    @classmethod
    def from_definition(cls, definition: ToolDefinition, handler: ToolHandler) -> "OpenAPITool":
        """Create the MCP tool for a compiled definition.

        Args:
            definition: Compiled operation
            handler: Coroutine executing validated arguments

        Returns:
            Tool ready for ``FastMCP.add_tool``
        """
        model = build_arguments_model(definition)
        return cls(
            name=definition.name,
            description=definition.description,
            parameters=tool_input_schema(model),
            definition=definition,
            arguments_model=model,
            handler=handler,
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        """Validate arguments and execute the operation."""
        try:
            validated = validated_arguments(self.arguments_model, arguments)
        except ValidationError as e:
            raise ToolError(f"Invalid arguments for {self.name}: {e}") from e

        text = await self.handler(validated)
        return ToolResult(content=[TextContent(type="text", text=text)])
