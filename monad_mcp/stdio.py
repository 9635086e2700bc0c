"""MCP stdio transport built on the ``mcp`` SDK server."""

from __future__ import annotations

import logging
from typing import Any, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from monad_mcp.mcp import Dispatcher
from monad_mcp.server import MCP_SERVER_NAME, MCP_SERVER_VERSION
from monad_mcp.tools.validators import to_json_schema

logger = logging.getLogger(__name__)


def list_mcp_tools(dispatcher: Dispatcher) -> List[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=to_json_schema(tool.input_schema))
        for tool in dispatcher.registry.definitions()
    ]


async def call_mcp_tool(dispatcher: Dispatcher, name: str, arguments: Any) -> List[TextContent]:
    """Dispatch one call; failures come back as text like successes."""
    result = await dispatcher.dispatch(name, arguments)
    return [TextContent(type="text", text=block.text) for block in result.content]


def build_server(dispatcher: Dispatcher) -> Server:
    """
    Wire the dispatcher into an SDK server.

    Input validation by the SDK is disabled so argument errors are reported
    by the dispatcher with its own messages.
    """
    app = Server(MCP_SERVER_NAME, version=MCP_SERVER_VERSION)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        return list_mcp_tools(dispatcher)

    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> List[TextContent]:
        return await call_mcp_tool(dispatcher, name, arguments)

    return app


async def serve_stdio(dispatcher: Dispatcher) -> None:
    """Serve until the client closes stdin."""
    app = build_server(dispatcher)
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())
    logger.info("stdin closed; stopping")
