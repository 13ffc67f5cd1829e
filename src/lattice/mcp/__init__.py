"""MCP integration: JSON tool functions and an optional FastMCP server."""
