"""Server factory for creating MCP server instances."""

from typing import Annotated

import httpx
from pydantic import Field

from ..api.client import RequestExecutor
from ..config.models import SpecBridgeConfig
from ..tools.registry import ToolRegistry
from ..utils.logging import get_logger
from .handlers import SpecHandlers
from .mcp_server import SpecBridgeServer

logger = get_logger("mcp.factory")


async def create_mcp_server(
    config: SpecBridgeConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SpecBridgeServer:
    """Create MCP server with all dependencies.

    Args:
        config: Application configuration
        transport: Optional HTTP transport for outbound calls

    Returns:
        Configured MCP server instance
    """
    logger.info("Creating MCP server", name=config.server.name)

    registry = ToolRegistry(config.specs)
    executor = RequestExecutor(config.http, transport=transport)

    mcp_server = SpecBridgeServer(
        config=config,
        registry=registry,
        executor=executor,
    )

    _register_handlers(mcp_server, SpecHandlers(config, executor.client))

    logger.info("MCP server created successfully")
    return mcp_server


def _register_handlers(mcp_server: SpecBridgeServer, handlers: SpecHandlers) -> None:
    """Register the built-in spec management tools.

    Args:
        mcp_server: MCP server instance
        handlers: Spec handlers backing the tools
    """
    logger.debug("Registering built-in tools")

    server = mcp_server.server

    @server.tool(
        name="specbridge_list_specs",
        description="List all OpenAPI specification files in the specs folder",
    )
    async def list_specs() -> str:
        return await handlers.list_specs()

    @server.tool(
        name="specbridge_get_spec",
        description="Get the content of a specific OpenAPI specification file",
    )
    async def get_spec(
        filename: Annotated[
            str,
            Field(description='The filename of the spec to retrieve (e.g., "petstore.json", "github.yaml")'),
        ],
    ) -> str:
        return await handlers.get_spec(filename)

    @server.tool(
        name="specbridge_update_spec",
        description="Update the content of a specific OpenAPI specification file",
    )
    async def update_spec(
        filename: Annotated[
            str,
            Field(description='The filename of the spec to update (e.g., "petstore.json", "github.yaml")'),
        ],
        content: Annotated[str, Field(description="The new content for the specification file")],
    ) -> str:
        return await handlers.update_spec(filename, content)

    @server.tool(
        name="specbridge_download_spec",
        description=(
            "Download an OpenAPI specification from a URL and save it to the specs folder "
            "with a custom name. This allows you to give meaningful names to downloaded "
            'specs instead of generic names like "openapi.json".'
        ),
    )
    async def download_spec(
        url: Annotated[str, Field(description="The URL of the OpenAPI specification to download")],
        filename: Annotated[
            str,
            Field(
                description=(
                    "The filename to save the spec as. Choose a descriptive name that "
                    'identifies the API (e.g., "stripe-payments.json", "github-repos.yaml"). '
                    "Must end with .json, .yaml, or .yml."
                )
            ),
        ],
    ) -> str:
        return await handlers.download_spec(url, filename)

    logger.debug("Built-in tools registered")
