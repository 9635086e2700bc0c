"""Wallet address and balance tools."""

from __future__ import annotations

from web3 import Web3

from monad_mcp.chain import ERC20_ABI
from monad_mcp.chain.units import format_ether
from monad_mcp.context import WalletContext


def _balance_text(title: str, address: str, wei: int, symbol: str) -> str:
    return f"📍 **{title}**\n\n**Address:** `{address}`\n**Balance:** {format_ether(wei)} {symbol}"


async def get_wallet_address(context: WalletContext) -> str:
    """Return the address derived from the loaded private key."""
    return f"🔐 Your wallet address: `{context.address}`"


async def get_eth_balance(context: WalletContext) -> str:
    """Native ETH balance of the wallet on Sepolia."""
    balance = await context.sepolia.get_balance(context.address)
    return _balance_text("ETH Balance Check (Sepolia Testnet)", context.address, balance, "ETH")


async def get_mon_balance(context: WalletContext) -> str:
    """Native MON balance of the wallet on Monad testnet."""
    balance = await context.monad.get_balance(context.address)
    return _balance_text("MON Balance Check (Monad Testnet)", context.address, balance, "MON")


async def get_wmon_sepolia_balance(context: WalletContext) -> str:
    """ERC-20 wMON balance of the wallet on Sepolia."""
    balance = await fetch_wmon_balance(context)
    return _balance_text("Wrapped Monad (WMON) Balance Check (Sepolia Testnet)", context.address, balance, "WMON")


async def fetch_wmon_balance(context: WalletContext) -> int:
    token = Web3.to_checksum_address(context.config.wmon_sepolia_contract)
    balance = await context.sepolia.call_contract_method(token, ERC20_ABI, "balanceOf", [context.address])
    return int(balance)
