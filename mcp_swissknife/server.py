from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .config import ServerConfig
from .dispatcher import Dispatcher, ToolResult, load_modules
from .modules import default_modules

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    # stdout carries the protocol.
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text) for text in result.content],
        isError=result.is_error,
    )


def build_server(dispatcher: Dispatcher, config: ServerConfig) -> Server:
    """Expose the dispatcher's tools over the MCP tools/list and tools/call methods."""
    server: Server = Server(config.name, version=config.version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=spec.schema.json_schema(),
            )
            for spec in dispatcher.list_tools()
        ]

    # Arguments are checked by the dispatcher so errors keep its wording.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[dict]) -> types.CallToolResult:
        result = await dispatcher.call(name, arguments)
        return to_call_tool_result(result)

    return server


async def create_dispatcher(config: ServerConfig) -> Dispatcher:
    modules = await load_modules(default_modules(), config, config.disabled_modules)
    return Dispatcher(modules)


async def serve(config: ServerConfig) -> None:
    dispatcher = await create_dispatcher(config)
    server = build_server(dispatcher, config)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP Server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-swissknife",
        description="MCP Swiss Knife - Multi-purpose MCP server (stdio).",
    )
    parser.add_argument(
        "--vault-path",
        dest="vault_path",
        default=None,
        help="Path to Obsidian vault directory (optional).",
    )
    parser.add_argument(
        "--disable",
        default=None,
        help="Comma-separated list of modules to disable (e.g., obsidian,web-fetch).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Logging level: -v (INFO), -vv (DEBUG).",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    config = ServerConfig.from_env(vault_path=args.vault_path, disable=args.disable)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error running server")
        sys.exit(1)


if __name__ == "__main__":
    main()
