import asyncio
import contextlib
import logging
import os
import sys
import time
from typing import Optional

import click

# Starlette and uvicorn imports
from starlette.applications import Starlette
from starlette.routing import Route, Mount
from server.api import api_routes

import uvicorn

# MCP imports
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from omx_tools.plugin import registry, discover_and_register_tools
from omx_tools.claude_code import shutdown_job_manager

from config import env

from server.tool_result_processor import process_tool_result

# Create the server
server = Server("omx")

# Discover and register all tools at import time
discover_and_register_tools()


@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in registry.get_all_instances()
    ]


@server.call_tool()
async def call_tool_handler(name: str, arguments: Optional[dict]) -> list[TextContent]:
    arguments = arguments or {}
    logging.debug(f"Tool call: {name} with arguments: {arguments}")

    tool = registry.get_tool_instance(name)
    if not tool:
        available_tools = sorted(registry.tools)
        logging.error(f"Tool '{name}' not found. Available tools: {available_tools}")
        return [TextContent(type="text", text=f"Error: Unknown tool: {name}")]

    start_time = time.time()
    try:
        result = await tool.execute_tool(arguments)
    except Exception as e:
        logging.exception(f"Error executing tool {name}")
        return [TextContent(type="text", text=f"Error executing tool {name}: {e}")]

    duration_ms = (time.time() - start_time) * 1000
    logging.info(f"Tool '{name}' executed in {duration_ms:.2f}ms")
    return process_tool_result(result)


# Setup SSE transport
sse = SseServerTransport("/messages/")


async def handle_sse(request):
    async with sse.connect_sse(
        request.scope, request.receive, request._send
    ) as streams:
        try:
            await server.run(
                streams[0],
                streams[1],
                server.create_initialization_options(),
                raise_exceptions=False,
            )
        except Exception as e:
            logging.error(f"SSE handler error: {type(e).__name__}: {e}")


@contextlib.asynccontextmanager
async def lifespan(app):
    yield
    await shutdown_job_manager()


routes = [
    Route("/sse", endpoint=handle_sse),
    Mount("/messages/", app=sse.handle_post_message),
] + api_routes

# Create Starlette app
starlette_app = Starlette(routes=routes, lifespan=lifespan)


async def run_stdio() -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await shutdown_job_manager()


# Setup function for logging and environment
def setup():
    # Settings decide the log level, so load them first
    env.load()

    # Reset the logging configuration
    # This is important as basicConfig won't do anything if the root logger
    # already has handlers configured
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Console handler on stderr; stdout carries the stdio transport
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if env.is_debug_enabled() else logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if env.get_setting("log_to_file", True):
        log_dir = env.get_omx_home() / "logs"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(str(log_dir / "server.log"))
        except OSError as e:
            logger.warning(f"File logging disabled, cannot open {log_dir}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.info(f"Initialized environment: omx home={env.get_omx_home()}")


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default="stdio",
    show_default=True,
    help="MCP transport to serve",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Host to bind (sse only)")
@click.option("--port", default=None, type=int, help="Port to run the server on (sse only)")
def main(transport: str, host: str, port: Optional[int] = None) -> None:
    setup()

    if transport == "stdio":
        logging.info("omx MCP server running on stdio")
        asyncio.run(run_stdio())
        return

    # Determine port from CLI argument, environment variable, or default
    if port is None:
        port = int(os.environ.get("SERVER_PORT", 8000))

    logging.info(f"Starting SSE server on {host}:{port}")
    uvicorn.run(starlette_app, host=host, port=port)


if __name__ == "__main__":
    main()
