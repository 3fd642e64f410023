"""MCP stdio server entrypoint."""
from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from typing import Any

import mcp.server.stdio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError

from .config import LOG_LEVEL_ENV, ConfigurationError, Settings
from .errors import ToolError, UnknownToolError
from .llm import ModelConfig
from .logging_setup import configure_logging
from .tool import TOOL_DESCRIPTION, TOOL_INPUT_SCHEMA, TOOL_NAME, DocSummaryTool

logger = logging.getLogger(__name__)

SERVER_NAME = "doc-context-provider"
SERVER_VERSION = "0.2.1"
SERVER_INSTRUCTIONS = (
    "Crawls and summarizes documentation context from a starting URL and its "
    "linked pages using Gemini."
)


def tool_definitions() -> list[types.Tool]:
    return [
        types.Tool(
            name=TOOL_NAME,
            description=TOOL_DESCRIPTION,
            inputSchema=TOOL_INPUT_SCHEMA,
        )
    ]


def call_tool(tool: DocSummaryTool, name: str, arguments: Any) -> list[types.TextContent]:
    """Run a tool call, translating failures into protocol errors."""
    try:
        if name != TOOL_NAME:
            raise UnknownToolError(f"Unknown tool: {name}")
        payload = tool.run_json(arguments)
    except ToolError as exc:
        logger.error("Tool call %s failed: %s", name, exc.message)
        raise McpError(types.ErrorData(code=exc.code, message=exc.message)) from exc

    logger.info("Request processed successfully.")
    return [types.TextContent(type="text", text=payload)]


def build_server(tool: DocSummaryTool) -> Server:
    server = Server(SERVER_NAME, version=SERVER_VERSION, instructions=SERVER_INSTRUCTIONS)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return tool_definitions()

    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        # Playwright's sync API must not run on the event loop thread.
        content = await asyncio.to_thread(
            call_tool, tool, request.params.name, request.params.arguments
        )
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    # McpError must reach the request dispatcher to be sent as a JSON-RPC error.
    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


async def serve(tool: DocSummaryTool) -> None:
    server = build_server(tool)
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        logger.info("Documentation context provider running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def _raise_shutdown(signum: int, frame: Any) -> None:
    logger.info("Received %s; shutting down server...", signal.Signals(signum).name)
    raise KeyboardInterrupt


def main() -> None:
    configure_logging(os.getenv(LOG_LEVEL_ENV))
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        logger.critical("FATAL: %s", exc)
        sys.exit(1)

    tool = DocSummaryTool(ModelConfig.from_settings(settings))
    signal.signal(signal.SIGTERM, _raise_shutdown)
    logger.info("Starting %s %s with model %s", SERVER_NAME, SERVER_VERSION, settings.model)
    try:
        # asyncio.run joins the worker thread, so an in-flight crawl still
        # closes its browser before the process exits.
        asyncio.run(serve(tool))
    except KeyboardInterrupt:
        logger.info("Server stopped.")
    except Exception:
        logger.exception("Critical error while running the server")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - manual script usage
    main()
