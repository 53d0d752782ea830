"""MCP server assembly."""

import logging

from mcp.server import FastMCP

from mobile_native_workflow.server.container import Container

logger = logging.getLogger(__name__)


def create_server(container: Container | None = None) -> FastMCP:
    """Create the FastMCP server and register every tool from the container."""
    container = container or Container()
    server = FastMCP(container.config.server.name)
    for tool in container.tools:
        tool.register(server)
    logger.info("MCP server %s ready with %d tools", container.config.server.name, len(container.tools))
    return server
