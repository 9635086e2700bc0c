"""
Cross-chain bridge tools between Sepolia and Monad testnet.

Both directions go through the Wormhole generic relayer. The Sepolia side is
an ERC-20 approve followed by a bridge ``transfer`` call; the two steps are
not atomic, so a failure after the approval leaves the allowance in place.
The Monad side is a single native-value transaction whose calldata is
assembled by ``build_monad_bridge_calldata``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from web3 import Web3

from monad_mcp.chain import ERC20_ABI, SEPOLIA_BRIDGE_WMON_ABI, ChainClientError
from monad_mcp.chain.units import format_amount, format_ether, to_wei
from monad_mcp.config import ConfigError, MonadConfig
from monad_mcp.context import WalletContext
from monad_mcp.tools.calldata import encode_calldata, pad_address
from monad_mcp.tools.wallet import fetch_wmon_balance

logger = logging.getLogger(__name__)

WORMHOLESCAN_TX_URL = "https://wormholescan.io/#/tx/{tx_hash}?network=Testnet&view=overview"
SEPOLIA_EXPLORER_URL = "https://sepolia.etherscan.io/address/{address}"
MONAD_EXPLORER_URL = "https://testnet.monadexplorer.com/address/{address}"


class InsufficientBalanceError(Exception):
    """Raised when the wallet cannot cover a bridge amount plus fees."""


def _require_contract(address: Optional[str], env_var: str) -> str:
    if not address:
        raise ConfigError(f"Bridge contract is not configured; set {env_var}.")
    return Web3.to_checksum_address(address)


def _links(tx_hash: str, address: str) -> str:
    return (
        f"🔗 View on Wormhole Scan:\n{WORMHOLESCAN_TX_URL.format(tx_hash=tx_hash)}\n"
        f"🔗 Check your balance on Sepolia. {SEPOLIA_EXPLORER_URL.format(address=address)}\n"
        f"🔗 Check your MONAD balance. {MONAD_EXPLORER_URL.format(address=address)}"
    )


def build_monad_bridge_calldata(config: MonadConfig, amount_wei: int, recipient: str) -> bytes:
    """Calldata for the Monad relayer: amount, target chain, receiver gas, recipient."""
    return encode_calldata(
        config.monad_transfer_selector,
        [
            ("uint256", amount_wei),
            ("uint16", config.sepolia_chain_id),
            ("uint256", config.monad_receiver_gas),
            ("address", recipient),
        ],
    )


async def bridge_sepolia_wmon_to_monad(context: WalletContext, amount: Decimal) -> str:
    """
    Bridge wMON on Sepolia to native MON on Monad.

    Args:
        context: wallet context with the Sepolia chain client.
        amount: validated wMON amount (0 < amount <= 10).

    Returns:
        Success text with tracking links.

    Raises:
        InsufficientBalanceError: wMON balance below ``amount``; nothing is sent.
        ChainClientError: approval or transfer failed.
    """
    config = context.config
    bridge = _require_contract(config.sepolia_bridge_contract, "SEPOLIA_BRIDGE_CONTRACT")
    token = Web3.to_checksum_address(config.wmon_sepolia_contract)
    bridge_amount = to_wei(amount)

    balance = await fetch_wmon_balance(context)
    if balance < bridge_amount:
        raise InsufficientBalanceError(
            f"WMON balance is insufficient. You need {format_amount(amount)} wMON to continue, "
            f"but you only have {format_ether(balance)} wMON."
        )

    approval = await context.sepolia.transact_contract_method(
        token, ERC20_ABI, "approve", [bridge, bridge_amount], gas_limit=config.approve_gas_limit
    )
    await context.sepolia.wait_for_confirmation(approval)

    try:
        tx_hash = await context.sepolia.transact_contract_method(
            bridge,
            SEPOLIA_BRIDGE_WMON_ABI,
            "transfer",
            [
                token,
                bridge_amount,
                config.monad_chain_id,
                config.sepolia_receiver_gas,
                pad_address(context.address),
            ],
            value=to_wei(config.sepolia_bridge_fee),
            gas_limit=config.bridge_gas_limit,
        )
        await context.sepolia.wait_for_confirmation(tx_hash)
    except ChainClientError as exc:
        logger.warning("bridge transfer failed after approval %s", approval)
        raise ChainClientError(
            f"{exc} (the wMON allowance from approval {approval} is still granted to the bridge)",
            network=exc.network,
        ) from exc

    return (
        "✅ **Bridge wrapped MON (wMON) to MONAD initiated successfully!**\n"
        "🔁 Please allow approximately **18-20 minutes** for the bridge to complete and the MON "
        "tokens to appear in your wallet on the Monad network.\n"
        f"{_links(tx_hash, context.address)}"
    )


async def bridge_monad_to_sepolia_wmon(context: WalletContext, amounts: Decimal) -> str:
    """
    Bridge native MON on Monad to wMON on Sepolia.

    The transaction value is the amount plus the fixed relayer fee; the
    wallet must hold at least that much MON (gas is paid on top).
    """
    config = context.config
    bridge = _require_contract(config.monad_bridge_contract, "MONAD_BRIDGE_CONTRACT")
    total = amounts + config.monad_bridge_fee
    total_wei = to_wei(total)

    balance = await context.monad.get_balance(context.address)
    if balance < total_wei:
        raise InsufficientBalanceError(
            f"MON balance is insufficient. The transaction needs {format_amount(total)} MON "
            f"(amount + bridge fee, excluding gas) but you only have {format_ether(balance)} MON."
        )

    calldata = build_monad_bridge_calldata(config, to_wei(amounts), context.address)
    tx_hash = await context.monad.send_transaction(bridge, total_wei, calldata, config.bridge_gas_limit)
    await context.monad.wait_for_confirmation(tx_hash)

    return (
        f"✅ **Bridge {format_amount(total)} MON (Amount + Fee) initiated successfully!**\n"
        "🔁 Please allow approximately **1-2 minutes** for the bridge to complete and the wMON "
        "tokens to appear in your wallet on Sepolia.\n"
        f"{_links(tx_hash, context.address)}\n"
        "Note: You will get wMON on Sepolia. Swap wMON/ETH on Uniswap Testnet to get ETH; import the "
        f"wMON contract ({config.wmon_sepolia_contract}) in Uniswap Testnet mode."
    )
