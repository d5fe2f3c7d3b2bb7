"""MCP server wiring."""

from .factory import create_mcp_server
from .handlers import SpecHandlers
from .mcp_server import SpecBridgeServer

__all__ = ["SpecBridgeServer", "SpecHandlers", "create_mcp_server"]
