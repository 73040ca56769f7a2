"""
MCP stdio transport for the QA gateway.

A low-level ``mcp`` Server whose handlers are thin adapters over Gateway:

    resources/templates/list  <- Gateway.list_resources()
    resources/list            <- Gateway.list_concrete_resources()
    resources/read            <- Gateway.read_resource()
    tools/list                <- Gateway.list_tools()
    tools/call                <- Gateway.invoke_tool()

SDK-side input validation is disabled for tools/call so the executor's own
missing-argument and validation messages reach the caller unchanged.
"""
from __future__ import annotations

import asyncio
from typing import Any, Iterable

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from qalens import logging as qlog
from qalens.gateway import Gateway


def create_server(gateway: Gateway) -> Server:
    server: Server = Server(gateway.config.server_name)

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(
                uriTemplate=entry["locatorTemplate"],
                name=entry["name"],
                description=entry["description"],
                mimeType=entry["mimeType"],
            )
            for entry in gateway.list_resources()["resources"]
        ]

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(uri=entry["locator"], name=entry["name"], mimeType=entry["mimeType"])
            for entry in gateway.list_concrete_resources()
        ]

    @server.read_resource()
    async def read_resource(uri: Any) -> Iterable[ReadResourceContents]:
        result = gateway.read_resource(str(uri))
        return [
            ReadResourceContents(content=entry["text"], mime_type=entry["mimeType"])
            for entry in result["contents"]
        ]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=entry["name"],
                description=entry["description"],
                inputSchema=entry["inputSchema"],
            )
            for entry in gateway.list_tools()["tools"]
        ]

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        result = gateway.invoke_tool(name, arguments or {})
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.text)],
            isError=result.is_error,
        )

    return server


async def run_stdio(gateway: Gateway) -> None:
    """Serve the gateway over stdin/stdout until the client disconnects."""
    server = create_server(gateway)
    qlog.info(
        "gateway.server",
        "Serving over stdio",
        server=gateway.config.server_name,
        tools=len(gateway.registry),
    )
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def serve(gateway: Gateway) -> None:
    """Sync entry point."""
    asyncio.run(run_stdio(gateway))
