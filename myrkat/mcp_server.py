#!/usr/bin/env python3
"""
Myrkat MCP Server
Exposes the collection store to agents as MCP tools over stdio.
Every tool call travels the bus as a storage:request, like any other client.
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .app_context import AppContext, MyrkatConfig
from .core.constants import STORAGE_REQUEST_TOPIC
from .core.exceptions import MyrkatError
from .start_http_server import configure_logging

logger = logging.getLogger(__name__)

_COLLECTION = {"type": "string", "description": "Collection name (e.g. notes)"}
_WHERE = {"type": "object", "description": "Equality filter: every key must match the document field"}

TOOLS = [
    Tool(
        name="store_find",
        description="Find documents in a collection. An empty or missing filter returns every document.",
        inputSchema={
            "type": "object",
            "properties": {"collection": _COLLECTION, "where": _WHERE},
            "required": ["collection"]
        }
    ),
    Tool(
        name="store_insert",
        description="Insert one document or a list of documents. The store assigns id, createdAt and updatedAt.",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": _COLLECTION,
                "data": {"type": ["object", "array"], "description": "Document or list of documents"}
            },
            "required": ["collection", "data"]
        }
    ),
    Tool(
        name="store_update",
        description="Merge fields into every document matching the filter. id and createdAt cannot be changed.",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": _COLLECTION,
                "where": _WHERE,
                "data": {"type": "object", "description": "Fields to set"}
            },
            "required": ["collection", "where", "data"]
        }
    ),
    Tool(
        name="store_delete",
        description="Delete every document matching the filter. Returns the number removed.",
        inputSchema={
            "type": "object",
            "properties": {"collection": _COLLECTION, "where": _WHERE},
            "required": ["collection", "where"]
        }
    ),
    Tool(
        name="store_ping",
        description="Health check for MCP connectivity. Returns server status and registered plugins.",
        inputSchema={
            "type": "object",
            "properties": {}
        }
    ),
]

_OPERATIONS = {
    "store_find": "find",
    "store_insert": "insert",
    "store_update": "update",
    "store_delete": "delete",
}


async def dispatch_tool(context: AppContext, name: str, arguments: Any) -> list[TextContent]:
    """Run one tool call against a context with uniform error handling."""
    arguments = arguments or {}
    try:
        if name == "store_ping":
            result = {
                "status": "ok",
                "plugins": [p.id for p in context.registry.get_plugins()],
                "data_dir": str(context.store.root),
            }
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

        elif name in _OPERATIONS:
            envelope = {**arguments, "operation": _OPERATIONS[name]}
            result = await context.bus.request(STORAGE_REQUEST_TOPIC, envelope)
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except MyrkatError as e:
        # Structured error response for known errors
        logger.warning(f"Store error in {name}: {e}")
        return [TextContent(type="text", text=json.dumps({"error": str(e), "type": type(e).__name__}))]

    except Exception as e:
        logger.error(f"Unexpected error in {name}: {e}", exc_info=True)
        return [TextContent(type="text", text=json.dumps({"error": f"Internal error: {str(e)}"}))]


def create_server(context: AppContext) -> Server:
    """Build an MCP server bound to one application context."""
    server = Server("myrkat")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available store tools."""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        return await dispatch_tool(context, name, arguments)

    return server


async def main():
    """Main entry point."""
    # Logging goes to stderr; stdout carries the MCP protocol
    configure_logging()

    async with AppContext(MyrkatConfig.from_env()) as context:
        server = create_server(context)
        logger.info("Starting Myrkat MCP Server...")

        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
