"""SpecBridge: expose OpenAPI operations as MCP tools."""

__version__ = "1.0.2"
