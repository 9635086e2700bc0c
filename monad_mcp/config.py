"""
Configuration helpers for the Monad MCP server.

This module centralizes RPC endpoint selection, contract addresses, bridge
constants, timeouts and logging options. No secrets are stored in the
repository; the private key is read from the environment or a local file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Default connection settings
DEFAULT_SEPOLIA_RPC_URL = os.getenv("SEPOLIA_RPC_URL", "https://ethereum-sepolia-rpc.publicnode.com")
DEFAULT_MONAD_RPC_URL = os.getenv("MONAD_RPC_URL", "https://testnet-rpc.monad.xyz")
DEFAULT_WORMHOLESCAN_URL = os.getenv("WORMHOLESCAN_API_URL", "https://api.testnet.wormholescan.io")


def _load_timeout() -> float:
    raw_timeout = os.getenv("MONAD_MCP_HTTP_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return 30.0
    return 30.0


DEFAULT_TIMEOUT = _load_timeout()

# Private key handling
PRIVATE_KEY_ENV_VAR = "PRIVATE_KEY"
PRIVATE_KEY_FILE_ENV_VAR = "PRIVATE_KEY_FILE"
DEFAULT_PRIVATE_KEY_FILE = "private_key.txt"

# Contracts
DEFAULT_WMON_SEPOLIA_CONTRACT = os.getenv(
    "WMON_SEPOLIA_CONTRACT", "0xbc60de5fdec277c909eb1763f9996ca1ab496567"
)
DEFAULT_SEPOLIA_BRIDGE_CONTRACT = os.getenv("SEPOLIA_BRIDGE_CONTRACT")
DEFAULT_MONAD_BRIDGE_CONTRACT = os.getenv("MONAD_BRIDGE_CONTRACT")

# Wormhole chain ids
MONAD_WORMHOLE_CHAIN_ID = 48
SEPOLIA_WORMHOLE_CHAIN_ID = 10002

# Bridge limits and fees
MAX_BRIDGE_AMOUNT = Decimal("10")
SEPOLIA_BRIDGE_FEE_ETH = Decimal("0.003625")
MONAD_BRIDGE_FEE_MON = Decimal("0.4847456273")
SEPOLIA_BRIDGE_RECEIVER_GAS = 375000
MONAD_BRIDGE_RECEIVER_GAS = 375000
MONAD_TRANSFER_SELECTOR = "0xe5d486a5"
BRIDGE_GAS_LIMIT = 500000
APPROVE_GAS_LIMIT = 100000
HISTORY_PAGE_SIZE = 10
HISTORY_APP_ID = "GENERIC_RELAYER"

LOG_LEVEL = os.getenv("MONAD_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("MONAD_MCP_LOG_FORMAT", "json")  # json or plain


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""


def load_private_key() -> Optional[str]:
    """
    Load the signing key from environment or a local file.

    Returns:
        The hex private key if available, otherwise None. The key is never
        logged or returned to callers.
    """
    env_key = os.getenv(PRIVATE_KEY_ENV_VAR)
    if env_key:
        return env_key.strip()

    key_path = os.getenv(PRIVATE_KEY_FILE_ENV_VAR, DEFAULT_PRIVATE_KEY_FILE)
    if key_path:
        path = Path(key_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


@dataclass(slots=True)
class MonadConfig:
    """Runtime configuration for chain and indexer access."""

    sepolia_rpc_url: str = DEFAULT_SEPOLIA_RPC_URL
    monad_rpc_url: str = DEFAULT_MONAD_RPC_URL
    wormholescan_url: str = DEFAULT_WORMHOLESCAN_URL
    timeout: float = DEFAULT_TIMEOUT
    wmon_sepolia_contract: str = DEFAULT_WMON_SEPOLIA_CONTRACT
    sepolia_bridge_contract: Optional[str] = DEFAULT_SEPOLIA_BRIDGE_CONTRACT
    monad_bridge_contract: Optional[str] = DEFAULT_MONAD_BRIDGE_CONTRACT
    monad_chain_id: int = MONAD_WORMHOLE_CHAIN_ID
    sepolia_chain_id: int = SEPOLIA_WORMHOLE_CHAIN_ID
    max_bridge_amount: Decimal = MAX_BRIDGE_AMOUNT
    sepolia_bridge_fee: Decimal = SEPOLIA_BRIDGE_FEE_ETH
    monad_bridge_fee: Decimal = MONAD_BRIDGE_FEE_MON
    sepolia_receiver_gas: int = SEPOLIA_BRIDGE_RECEIVER_GAS
    monad_receiver_gas: int = MONAD_BRIDGE_RECEIVER_GAS
    monad_transfer_selector: str = MONAD_TRANSFER_SELECTOR
    bridge_gas_limit: int = BRIDGE_GAS_LIMIT
    approve_gas_limit: int = APPROVE_GAS_LIMIT
    history_page_size: int = HISTORY_PAGE_SIZE
    history_app_id: str = HISTORY_APP_ID
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    private_key: Optional[str] = field(default=None, repr=False)

    def require_private_key(self) -> str:
        key = self.private_key or load_private_key()
        if not key:
            raise ConfigError(
                f"No private key configured; set {PRIVATE_KEY_ENV_VAR} or {PRIVATE_KEY_FILE_ENV_VAR}."
            )
        return key


default_config = MonadConfig()
