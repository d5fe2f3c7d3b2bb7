"""FastMCP server implementation."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

import mcp.types as mt
from fastmcp import FastMCP
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext

from ..api.auth import CredentialMap, load_credentials
from ..api.client import RequestExecutor
from ..config.models import SpecBridgeConfig, TransportType
from ..openapi.apisguru import apis_guru_spec
from ..tools.mcp_tool import OpenAPITool
from ..tools.models import RegisteredTool
from ..tools.registry import ToolRegistry
from ..utils.errors import ConfigurationError
from ..utils.logging import get_logger

logger = get_logger("mcp.server")

INSTRUCTIONS = (
    "I bridge OpenAPI specifications to MCP tools. I load .json, .yaml, and .yml "
    "files containing OpenAPI specs from a specified folder and automatically "
    "generate tools for each endpoint. I also provide built-in tools for managing "
    "the OpenAPI specs themselves (list, get, update, download) and for discovering "
    "new APIs through the APIs.guru directory. Authentication is handled via "
    "environment variables with naming patterns like {API_NAME}_API_KEY."
)


class CredentialRefreshMiddleware(Middleware):
    """Rebuilds the credential map whenever a client session initializes."""

    def __init__(self, refresh: Callable[[], Awaitable[Any]]) -> None:
        self.refresh = refresh

    async def on_initialize(
        self,
        context: MiddlewareContext[mt.InitializeRequest],
        call_next: CallNext[mt.InitializeRequest, mt.InitializeResult | None],
    ) -> mt.InitializeResult | None:
        await self.refresh()
        logger.debug("Client session attached")
        return await call_next(context)


@dataclass(slots=True)
class SpecBridgeServer:
    """MCP server exposing compiled OpenAPI operations through FastMCP."""

    config: SpecBridgeConfig
    registry: ToolRegistry
    executor: RequestExecutor
    _server: FastMCP | None = None
    _credentials: CredentialMap = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Initialize FastMCP server."""
        self._server = FastMCP(
            self.config.server.name,
            instructions=INSTRUCTIONS,
            middleware=[CredentialRefreshMiddleware(self.refresh_credentials)],
        )
        logger.info("MCP server initialized", name=self.config.server.name)

    @property
    def server(self) -> FastMCP:
        """Get the FastMCP server instance."""
        if not self._server:
            raise RuntimeError("Server not initialized")
        return self._server

    @property
    def credentials(self) -> CredentialMap:
        """Current credential snapshot."""
        return self._credentials

    async def refresh_credentials(self) -> CredentialMap:
        """Rebuild the credential map and swap it in whole."""
        credentials = await asyncio.to_thread(load_credentials, self.config.specs.path)
        self._credentials = credentials
        logger.info("Credentials loaded", apis=sorted(credentials))
        return credentials

    async def load_tools(self) -> int:
        """Compile the specs directory and publish every tool.

        Returns:
            Number of tools published
        """
        await self.refresh_credentials()

        self.registry.add_spec(apis_guru_spec())
        loaded = await self.registry.load_all()

        published = 0
        for tool in self.registry.tools:
            try:
                self._publish(tool)
                published += 1
            except Exception as e:
                logger.error("Failed to register tool", name=tool.name, error=str(e))

        if not loaded:
            logger.warning("No OpenAPI documents loaded", path=str(self.config.specs.path))

        logger.info(
            "Tools loaded and registered successfully",
            count=published,
            specs=len(loaded),
        )
        return published

    def _publish(self, tool: RegisteredTool) -> OpenAPITool:
        """Register one tool with FastMCP, bound to its namespace credentials."""
        definition = tool.definition
        api_name = tool.api_name

        async def handler(arguments: dict[str, Any]) -> str:
            return await self.executor.execute(
                definition, arguments, self._credentials.get(api_name)
            )

        mcp_tool = OpenAPITool.from_definition(definition, handler)
        self.server.add_tool(mcp_tool)

        logger.debug(
            "Registered MCP tool",
            name=definition.name,
            method=definition.method.value,
            path=definition.path,
        )
        return mcp_tool

    async def get_server_runner(self) -> Callable[[], Awaitable[None]]:
        """Load tools and return the runner for the configured transport.

        Returns:
            Async callable that runs the server with configured transport
        """
        await self.load_tools()

        server_config = self.config.server
        match server_config.transport:
            case TransportType.STDIO:
                logger.info("Server ready for STDIO transport")
                return self._run_stdio
            case TransportType.HTTP | TransportType.SSE:
                logger.info(
                    "Server ready for network transport",
                    transport=server_config.transport.value,
                    host=server_config.host,
                    port=server_config.port,
                )
                return partial(
                    self._run_network,
                    server_config.transport.value,
                    server_config.host,
                    server_config.port,
                )
            case _:
                raise ConfigurationError(f"Unsupported transport: {server_config.transport}")

    async def cleanup(self) -> None:
        """Clean up server resources."""
        logger.info("Cleaning up MCP server resources")
        await self.executor.close()
        logger.info("MCP server cleanup completed")

    async def __aenter__(self) -> Callable[[], Awaitable[None]]:
        """Async context manager entry - returns server runner."""
        return await self.get_server_runner()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Async context manager exit."""
        await self.cleanup()

    async def _run_stdio(self) -> None:
        """Run server with STDIO transport."""
        await self.server.run_stdio_async()

    async def _run_network(self, transport: str, host: str, port: int) -> None:
        """Run server with HTTP or SSE transport."""
        await self.server.run_http_async(transport=transport, host=host, port=port)
