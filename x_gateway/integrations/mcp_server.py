"""
MCP stdio server exposing the X command gateway as tools.

Usage:
    python -m x_gateway.integrations.mcp_server
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from x_gateway.config import ConfigManager
from x_gateway.exceptions import ConfigurationError, UnknownCommand, ValidationError
from x_gateway.factory import create_gateway
from x_gateway.integrations.mcp_adapter import XMCPAdapter
from x_gateway.logging_config import configure_logging

logger = logging.getLogger(__name__)

SERVER_NAME = "x-gateway"


def build_server(adapter: XMCPAdapter) -> Server:
    """Create a low-level MCP server whose tools dispatch to ``adapter``."""
    server: Server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=name, description=schema["description"], inputSchema=schema["input_schema"])
            for name, schema in adapter.get_tool_schemas().items()
        ]

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        name = request.params.name
        arguments: dict[str, Any] | None = request.params.arguments
        try:
            result = await adapter.execute(name, arguments)
        except UnknownCommand as exc:
            raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=exc.message)) from exc
        except ValidationError as exc:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=exc.message,
                    data={"violations": exc.violations},
                )
            ) from exc

        return types.ServerResult(
            types.CallToolResult(
                content=[types.TextContent(type="text", text=result.text)],
                isError=result.is_error,
            )
        )

    # Registered directly: the decorator form would turn protocol faults into tool results.
    server.request_handlers[types.CallToolRequest] = call_tool
    return server


async def serve(adapter: XMCPAdapter) -> None:
    server = build_server(adapter)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console entry point."""
    config = ConfigManager()
    try:
        settings = config.load_settings()
    except ConfigurationError as exc:
        configure_logging()
        logger.error("Invalid gateway settings: %s", exc)
        sys.exit(1)

    configure_logging(settings.log_level)
    try:
        adapter = create_gateway(config)
    except ConfigurationError as exc:
        logger.error("Cannot start %s: %s", SERVER_NAME, exc)
        sys.exit(1)

    logger.info("Starting %s MCP server on stdio", SERVER_NAME)
    asyncio.run(serve(adapter))


if __name__ == "__main__":
    main()
