"""Convert OpenAPI specifications into MCP server tool configurations."""

__version__ = "0.1.0"