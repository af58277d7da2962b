"""
MCP server over stdio, backed by the operation table.

Tool calls run on a worker thread so the blocking osascript round trips never
stall the stdio loop.
"""

from typing import Optional

import anyio
from mcp.server import InitializationOptions, Server
from mcp.server.stdio import stdio_server
from mcp.types import ServerCapabilities, TextContent, Tool

from . import __version__
from .tools import ToolRegistry, build_registry
from .utils.logger import get_logger

log = get_logger(__name__)

SERVER_NAME = "omnifocus-mcp"


class ToolCallError(Exception):
    """Raised from the call handler so the SDK marks the result with ``isError``."""


def create_server(registry: ToolRegistry) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools():
        return [
            Tool(name=t["name"], description=t["description"], inputSchema=t["inputSchema"])
            for t in registry.list_tools()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict):
        result = await anyio.to_thread.run_sync(registry.invoke, name, arguments or {})
        if result.is_error:
            raise ToolCallError(result.text)
        return [TextContent(**block) for block in result.to_content()["content"]]

    return server


async def serve(registry: Optional[ToolRegistry] = None) -> None:
    registry = registry or build_registry()
    server = create_server(registry)
    init_options = InitializationOptions(
        server_name=SERVER_NAME,
        server_version=__version__,
        capabilities=ServerCapabilities(tools={}),
    )
    log.info("Starting %s %s with %d tools on stdio", SERVER_NAME, __version__, len(registry))
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    anyio.run(serve)


if __name__ == "__main__":
    main()
