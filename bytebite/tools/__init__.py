"""MCP tools for bytebite."""
