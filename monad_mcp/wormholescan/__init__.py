"""HTTP client for the Wormholescan bridge indexer."""

from .client import (
    OperationsQuery,
    WormholescanClient,
    WormholescanError,
    WormholescanUnreachableError,
)

__all__ = [
    "OperationsQuery",
    "WormholescanClient",
    "WormholescanError",
    "WormholescanUnreachableError",
]
