"""bytebite - MCP server

This module builds the FastMCP server exposing the feed tools, and the
``bytebite`` command line entry point that runs it over STDIO, SSE or
Streamable HTTP.
"""

import asyncio
import functools
import logging
import sys
from typing import Any, Callable, Dict, Optional

import click
from mcp.server.fastmcp import FastMCP

from bytebite.config import ServerConfig, get_config, load_config, set_config
from bytebite.errors import BytebiteError
from bytebite.logging_config import setup_logging, logger
from bytebite.tools.feed_tools import close_reader, feed_tools


def exception_handler(func: Callable) -> Callable:
    """Turn errors escaping a tool into an error payload instead of a crash."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            return await func(*args, **kwargs)
        except BytebiteError as e:
            logging.getLogger(func.__module__).error(f"{func.__name__} failed: {e}")
            return {
                "success": False,
                "error": str(e),
                "error_type": type(e).__name__,
                "recoverable": e.recoverable,
            }

    return wrapper


def create_mcp_server(config: Optional[ServerConfig] = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        config: Optional server configuration

    Returns:
        Configured FastMCP server instance
    """
    if config is None:
        config = get_config()

    # The tools build their reader from the process-wide config
    set_config(config)
    setup_logging(config)
    logger.info(f"Server config: {config.name} at log level {config.log_level}")
    logger.info(f"Data directory: {config.data_dir}")

    mcp_server = FastMCP(config.name or "bytebite")
    register_tools(mcp_server)

    logger.info("Server initialization complete")
    return mcp_server


def register_tools(mcp_server: FastMCP) -> None:
    """Register all feed tools with the server."""
    for tool_func in feed_tools:
        mcp_server.tool(name=tool_func.__name__)(exception_handler(tool_func))
        logger.info(f"Registered feed tool: {tool_func.__name__}")


@click.command()
@click.option(
    "--port",
    default=3001,
    help="Port to listen on for SSE or Streamable HTTP transport"
)
@click.option(
    "--host",
    default="127.0.0.1",
    help="Host to bind to (use 0.0.0.0 for Docker)"
)
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="Transport type (stdio, sse, or streamable-http)"
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML config file"
)
def main(port: int, host: str, transport: str, config_path: Optional[str]) -> int:
    """Run the bytebite server with specified transport."""
    try:
        config = load_config(config_path) if config_path else get_config()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e

    server = create_mcp_server(config)

    async def run_server():
        try:
            if transport == "stdio":
                logger.info("Starting server with STDIO transport")
                await server.run_stdio_async()
            elif transport == "sse":
                logger.info(f"Starting server with SSE transport on {host}:{port}")
                server.settings.host = host
                server.settings.port = port
                await server.run_sse_async()
            elif transport == "streamable-http":
                logger.info(f"Starting server with Streamable HTTP transport on {host}:{port}")
                server.settings.host = host
                server.settings.port = port
                server.settings.streamable_http_path = "/mcp"
                await server.run_streamable_http_async()
            else:
                raise ValueError(f"Unknown transport: {transport}")
        finally:
            await close_reader()

    try:
        asyncio.run(run_server())
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
