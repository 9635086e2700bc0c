"""Bridge history tool backed by the Wormholescan indexer."""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Dict, List

from monad_mcp.context import WalletContext
from monad_mcp.wormholescan import OperationsQuery


def _to_int(value: Any, *, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# Python 3.10 fromisoformat only takes 3 or 6 fractional digits.
_FRACTION_RE = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def _timestamp(value: Any) -> float:
    if not isinstance(value, str) or not value:
        return 0.0
    text = _FRACTION_RE.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(text).timestamp()
    except ValueError:
        return 0.0


def _source_timestamp(operation: Dict[str, Any]) -> float:
    source = operation.get("sourceChain")
    return _timestamp(source.get("timestamp")) if isinstance(source, dict) else 0.0


def _summarize_side(side: Any, prefix: str, monad_chain_id: int) -> Dict[str, str]:
    side = side if isinstance(side, dict) else {}
    is_monad = _to_int(side.get("chainId"), default=-1) == monad_chain_id
    transaction = side.get("transaction") if isinstance(side.get("transaction"), dict) else {}
    fee = side.get("fee")
    return {
        f"{prefix}Chain": "Monad" if is_monad else "Sepolia",
        f"{prefix}Hash": transaction.get("txHash") or "",
        f"{prefix}GasFee": f"{fee} {'MON' if is_monad else 'ETH'}" if fee is not None else "",
        f"{prefix}Timestamp": side.get("timestamp") or "",
        f"{prefix}Status": side.get("status") or "",
    }


def summarize_operation(operation: Dict[str, Any], monad_chain_id: int) -> Dict[str, str]:
    summary = _summarize_side(operation.get("sourceChain"), "source", monad_chain_id)
    summary.update(_summarize_side(operation.get("targetChain"), "target", monad_chain_id))
    return summary


async def get_last_bridge_transactions(context: WalletContext) -> str:
    """
    List the most recent bridge operations of the wallet in both directions.

    Both directions are fetched, merged, sorted newest first by the source
    chain timestamp and truncated to the configured page size.
    """
    config = context.config
    address = context.address
    directions = [
        (config.monad_chain_id, config.sepolia_chain_id),
        (config.sepolia_chain_id, config.monad_chain_id),
    ]
    operations: List[Dict[str, Any]] = []
    for source_chain, target_chain in directions:
        query = OperationsQuery(
            address=address,
            source_chain=source_chain,
            target_chain=target_chain,
            app_id=config.history_app_id,
            page_size=config.history_page_size,
        )
        operations.extend(await context.history.fetch_operations(query))

    if not operations:
        return f"📨 No bridge transactions found for address `{address}`."

    operations.sort(key=_source_timestamp, reverse=True)
    latest = [summarize_operation(op, config.monad_chain_id) for op in operations[: config.history_page_size]]
    return (
        f"📨 **Last {config.history_page_size} Bridge Transactions** for address `{address}`\n\n"
        f"{json.dumps(latest)}"
    )
