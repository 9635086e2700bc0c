"""
Thin async client for one EVM JSON-RPC endpoint and the loaded signing key.

Every transaction is signed locally with the single configured account and
submitted raw. Provider and contract failures are mapped to internal
exceptions that the tool layer turns into user-facing messages.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMATION_TIMEOUT = 180.0


class ChainClientError(Exception):
    """Base exception for chain access errors."""

    def __init__(self, message: str, *, network: Optional[str] = None) -> None:
        super().__init__(message)
        self.network = network


class ChainUnreachableError(ChainClientError):
    """Raised when the RPC endpoint cannot be reached."""


class TransactionRevertedError(ChainClientError):
    """Raised when a call or mined transaction reverts."""


class ChainClient:
    """Async access to one network on behalf of the loaded account."""

    def __init__(
        self,
        network: str,
        account: LocalAccount,
        *,
        rpc_url: Optional[str] = None,
        web3: Optional[AsyncWeb3] = None,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    ) -> None:
        if web3 is None:
            if not rpc_url:
                raise ValueError("ChainClient needs an rpc_url or a web3 instance")
            web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.network = network
        self.w3 = web3
        self._account = account
        self._confirmation_timeout = confirmation_timeout

    @property
    def address(self) -> str:
        return self._account.address

    @asynccontextmanager
    async def _translate_errors(self, action: str) -> AsyncIterator[None]:
        try:
            yield
        except ChainClientError:
            raise
        except ContractLogicError as exc:
            logger.warning("%s reverted on %s", action, self.network)
            raise TransactionRevertedError(f"Execution reverted: {exc}", network=self.network) from exc
        except TimeExhausted as exc:
            raise ChainClientError(f"Timed out waiting for {action} on {self.network}", network=self.network) from exc
        except (OSError, asyncio.TimeoutError) as exc:
            logger.warning("%s RPC unreachable during %s", self.network, action)
            raise ChainUnreachableError(f"{self.network} RPC unreachable", network=self.network) from exc
        except Web3Exception as exc:
            raise ChainClientError(str(exc), network=self.network) from exc

    async def get_balance(self, address: Optional[str] = None) -> int:
        """Native balance in wei."""
        target = Web3.to_checksum_address(address or self.address)
        async with self._translate_errors("get_balance"):
            return int(await self.w3.eth.get_balance(target))

    def _contract(self, contract_address: str, abi: List[Dict[str, Any]]):
        return self.w3.eth.contract(address=Web3.to_checksum_address(contract_address), abi=abi)

    async def call_contract_method(
        self,
        contract_address: str,
        abi: List[Dict[str, Any]],
        method: str,
        args: Sequence[Any] = (),
    ) -> Any:
        """Run a read-only contract call."""
        async with self._translate_errors(f"call {method}"):
            function = getattr(self._contract(contract_address, abi).functions, method)
            return await function(*args).call({"from": self.address})

    async def _base_transaction(self, *, value: int, gas_limit: int) -> Dict[str, Any]:
        return {
            "from": self.address,
            "value": value,
            "gas": gas_limit,
            "gasPrice": await self.w3.eth.gas_price,
            "nonce": await self.w3.eth.get_transaction_count(self.address, "pending"),
            "chainId": await self.w3.eth.chain_id,
        }

    async def _sign_and_send(self, transaction: Dict[str, Any]) -> str:
        signed = self._account.sign_transaction(transaction)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("submitted transaction %s on %s", Web3.to_hex(tx_hash), self.network)
        return Web3.to_hex(tx_hash)

    async def transact_contract_method(
        self,
        contract_address: str,
        abi: List[Dict[str, Any]],
        method: str,
        args: Sequence[Any] = (),
        *,
        value: int = 0,
        gas_limit: int = 500000,
    ) -> str:
        """Sign and submit a state-changing contract call; return the tx hash."""
        async with self._translate_errors(f"transact {method}"):
            function = getattr(self._contract(contract_address, abi).functions, method)
            base = await self._base_transaction(value=value, gas_limit=gas_limit)
            transaction = await function(*args).build_transaction(base)
            return await self._sign_and_send(transaction)

    async def send_transaction(self, to: str, value: int, data: bytes = b"", gas_limit: int = 500000) -> str:
        """Sign and submit a raw transaction; return the tx hash."""
        async with self._translate_errors("send_transaction"):
            transaction = await self._base_transaction(value=value, gas_limit=gas_limit)
            transaction["to"] = Web3.to_checksum_address(to)
            transaction["data"] = Web3.to_hex(data)
            return await self._sign_and_send(transaction)

    async def wait_for_confirmation(self, tx_hash: str) -> Dict[str, Any]:
        """Wait for the receipt; raise if the transaction reverted."""
        async with self._translate_errors(f"confirmation of {tx_hash}"):
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._confirmation_timeout)
        if receipt.get("status") == 0:
            raise TransactionRevertedError(f"Transaction {tx_hash} reverted", network=self.network)
        return dict(receipt)
