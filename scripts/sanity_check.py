"""Minimal read-only sanity checks for the Monad MCP tools against live endpoints."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from monad_mcp.context import build_context  # noqa: E402
from monad_mcp.mcp import Dispatcher, build_registry  # noqa: E402

# Bridge tools move funds and are never run here.
READ_ONLY_TOOLS = (
    "get-wallet-address",
    "get-eth-balance",
    "get-mon-balance",
    "get-wmon-sepolia-balance",
)
# Opt-in to the Wormholescan history lookup.
RUN_HISTORY = os.getenv("RUN_HISTORY_SANITY", "false").lower() in {"1", "true", "yes"}


async def main() -> None:
    context = build_context()
    dispatcher = Dispatcher(build_registry(), context)
    tools = list(READ_ONLY_TOOLS)
    if RUN_HISTORY:
        tools.append("get-10-last-bridge-transaction")
    try:
        for name in tools:
            result = await dispatcher.dispatch(name)
            print(f"{name}:", result.text)
    finally:
        await context.aclose()


if __name__ == "__main__":
    asyncio.run(main())
