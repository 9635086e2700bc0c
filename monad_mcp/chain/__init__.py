"""EVM chain access for the Monad MCP tools."""

from .abi import ERC20_ABI, SEPOLIA_BRIDGE_WMON_ABI
from .client import (
    ChainClient,
    ChainClientError,
    ChainUnreachableError,
    TransactionRevertedError,
)

__all__ = [
    "ChainClient",
    "ChainClientError",
    "ChainUnreachableError",
    "TransactionRevertedError",
    "ERC20_ABI",
    "SEPOLIA_BRIDGE_WMON_ABI",
]
