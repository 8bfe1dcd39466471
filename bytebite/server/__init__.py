"""MCP server package initialization"""

from bytebite.server.app import create_mcp_server, main

__all__ = ["create_mcp_server", "main"]
