import os
import sys
from typing import Any, Dict, List, Tuple

import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from monad_mcp.config import MonadConfig  # noqa: E402
from monad_mcp.context import WalletContext  # noqa: E402
from monad_mcp.mcp import Dispatcher, build_registry  # noqa: E402
from monad_mcp.metrics import default_metrics  # noqa: E402

WALLET = "0x52908400098527886E0F7030069857D2E4169EE7"
SEPOLIA_BRIDGE = "0x" + "11" * 20
MONAD_BRIDGE = "0x" + "22" * 20
ETHER = 10**18


class StubChainClient:
    """Records every call; returns canned balances and tx hashes."""

    def __init__(self, *, balance: int = 0, token_balance: int = 0, fail_on: Dict[str, Exception] | None = None):
        self.address = WALLET
        self.balance = balance
        self.token_balance = token_balance
        self.fail_on = fail_on or {}
        self.calls: List[Tuple[Any, ...]] = []

    def _maybe_fail(self, key: str) -> None:
        if key in self.fail_on:
            raise self.fail_on[key]

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)

    async def get_balance(self, address=None):
        self.calls.append(("get_balance", address))
        self._maybe_fail("get_balance")
        return self.balance

    async def call_contract_method(self, contract_address, abi, method, args=()):
        self.calls.append(("call", contract_address, method, list(args)))
        self._maybe_fail(method)
        return self.token_balance

    async def transact_contract_method(self, contract_address, abi, method, args=(), *, value=0, gas_limit=500000):
        self.calls.append(("transact", contract_address, method, list(args), value, gas_limit))
        self._maybe_fail(method)
        return f"0x{method}hash"

    async def send_transaction(self, to, value, data=b"", gas_limit=500000):
        self.calls.append(("send", to, value, data, gas_limit))
        self._maybe_fail("send")
        return "0xsendhash"

    async def wait_for_confirmation(self, tx_hash):
        self.calls.append(("wait", tx_hash))
        self._maybe_fail(f"wait:{tx_hash}")
        return {"status": 1, "transactionHash": tx_hash}


class StubHistoryClient:
    def __init__(self, operations: Dict[Tuple[int, int], List[Dict[str, Any]]] | None = None, error: Exception | None = None):
        self.operations = operations or {}
        self.error = error
        self.queries: List[Any] = []
        self.closed = False

    async def fetch_operations(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.operations.get((query.source_chain, query.target_chain), []))

    async def aclose(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture
def config():
    return MonadConfig(sepolia_bridge_contract=SEPOLIA_BRIDGE, monad_bridge_contract=MONAD_BRIDGE)


@pytest.fixture
def sepolia():
    return StubChainClient(balance=ETHER, token_balance=3 * ETHER)


@pytest.fixture
def monad():
    return StubChainClient(balance=20 * ETHER)


@pytest.fixture
def history():
    return StubHistoryClient()


@pytest.fixture
def context(sepolia, monad, history, config):
    return WalletContext(sepolia=sepolia, monad=monad, history=history, config=config)


@pytest.fixture
def dispatcher(context):
    return Dispatcher(build_registry(), context)
