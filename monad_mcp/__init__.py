"""
Monad MCP server package.

This package exposes wallet, balance and bridge tools for Sepolia and the
Monad testnet to LLM agents over an MCP-style JSON-RPC channel. See
DESIGN.md for full details.
"""

__all__ = ["config"]
