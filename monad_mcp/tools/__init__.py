"""LLM-facing tool implementations."""

from .wallet import get_eth_balance, get_mon_balance, get_wallet_address, get_wmon_sepolia_balance
from .bridge import (
    InsufficientBalanceError,
    bridge_monad_to_sepolia_wmon,
    bridge_sepolia_wmon_to_monad,
)
from .history import get_last_bridge_transactions
from . import calldata, validators

__all__ = [
    "get_wallet_address",
    "get_eth_balance",
    "get_mon_balance",
    "get_wmon_sepolia_balance",
    "bridge_sepolia_wmon_to_monad",
    "bridge_monad_to_sepolia_wmon",
    "get_last_bridge_transactions",
    "InsufficientBalanceError",
    "calldata",
    "validators",
]
