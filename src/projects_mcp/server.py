"""MCP server exposing the Projects connector over stdio."""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .config import get_settings
from .connectors.exceptions import ProjectsValidationError
from .connectors.http_client import close_http_client, get_http_client
from .connectors.projects import ProjectsConnector
from .observability.logging import configure_logging

logger = logging.getLogger(__name__)


class ProjectsMCPServer:
    """Binds ProjectsConnector tools to an ``mcp.server.Server``."""

    def __init__(self, connector: Optional[ProjectsConnector] = None):
        self.connector = connector or ProjectsConnector()
        self.server = Server("projects-mcp")
        self._tool_names: set = set()
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return await self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: Optional[Dict[str, Any]] = None
        ) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    async def list_tools(self) -> List[types.Tool]:
        tools = await self.connector.get_tools()
        self._tool_names = {tool.name for tool in tools}
        logger.debug("Returning %d tools", len(tools))
        return tools

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> List[types.TextContent]:
        """Run one tool call and wrap its JSON payload as text content."""
        if not self._tool_names:
            await self.list_tools()
        if name not in self._tool_names:
            payload = ProjectsValidationError(f"unknown tool: {name}").to_payload()
            return [types.TextContent(type="text", text=json.dumps(payload, indent=2))]

        logger.info("Tool call: %s", name)
        result = await self.connector.execute_tool(name, arguments or {})
        return [types.TextContent(type="text", text=result)]

    async def run_stdio(self):
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


async def serve():
    settings = get_settings()
    configure_logging(environment=settings.environment, log_level=settings.log_level)
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set; requests will be unauthenticated")

    # Warm up HTTP client (creates connection pool)
    get_http_client()
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    try:
        await ProjectsMCPServer().run_stdio()
    finally:
        await close_http_client()


def main():
    asyncio.run(serve())


if __name__ == "__main__":
    main()
