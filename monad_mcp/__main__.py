"""Entry point: ``python -m monad_mcp`` serves the tools over stdio."""

from __future__ import annotations

import asyncio
import logging
import sys

from monad_mcp.config import ConfigError, default_config
from monad_mcp.context import build_context
from monad_mcp.mcp import Dispatcher, build_registry
from monad_mcp.server import advertised_tools, configure_logging
from monad_mcp.stdio import serve_stdio

logger = logging.getLogger("monad_mcp")


async def run() -> None:
    context = build_context(default_config)
    dispatcher = Dispatcher(build_registry(), context)
    logger.info("Monad MCP server running on stdio; tools=%s", ",".join(advertised_tools(dispatcher)))
    try:
        await serve_stdio(dispatcher)
    finally:
        await context.aclose()


def main() -> int:
    configure_logging(default_config)
    try:
        asyncio.run(run())
    except ConfigError as exc:
        logger.error("Fatal configuration error: %s", exc)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
