"""Clients shared by every tool handler for the lifetime of the process."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from eth_account import Account

from monad_mcp.chain import ChainClient
from monad_mcp.config import MonadConfig, default_config
from monad_mcp.wormholescan import WormholescanClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletContext:
    """
    The single signing identity and the clients acting for it.

    ``sepolia`` and ``monad`` are chain clients; ``history`` is the
    Wormholescan client. Tests substitute stubs exposing the same methods.
    """

    sepolia: Any
    monad: Any
    history: Any
    config: MonadConfig = field(default_factory=lambda: default_config)

    @property
    def address(self) -> str:
        return self.sepolia.address

    async def aclose(self) -> None:
        closer = getattr(self.history, "aclose", None)
        if closer is not None:
            await closer()


def build_context(config: MonadConfig | None = None) -> WalletContext:
    """Load the private key and build the chain and history clients."""
    config = config or default_config
    account = Account.from_key(config.require_private_key())
    logger.info("loaded signing account %s", account.address)
    return WalletContext(
        sepolia=ChainClient("Sepolia", account, rpc_url=config.sepolia_rpc_url),
        monad=ChainClient("Monad", account, rpc_url=config.monad_rpc_url),
        history=WormholescanClient(config),
        config=config,
    )
