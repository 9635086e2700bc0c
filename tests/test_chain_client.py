import pytest
from eth_account import Account
from web3.exceptions import ContractLogicError, TimeExhausted

from monad_mcp.chain import (
    ERC20_ABI,
    ChainClient,
    ChainClientError,
    ChainUnreachableError,
    TransactionRevertedError,
)

ACCOUNT = Account.from_key("0x" + "11" * 32)
TOKEN = "0x" + "33" * 20
TX_HASH = b"\xab" * 32


async def _value(value):
    return value


class FakeFunction:
    def __init__(self, eth, name, args):
        self.eth = eth
        self.name = name
        self.args = args

    async def call(self, tx):
        self.eth.seen.append(("call", self.name, self.args, tx))
        if self.eth.error is not None:
            raise self.eth.error
        return 42

    async def build_transaction(self, base):
        self.eth.seen.append(("build", self.name, self.args))
        return dict(base, to=TOKEN, data="0x095ea7b3")


class FakeFunctions:
    def __init__(self, eth):
        self._eth = eth

    def __getattr__(self, name):
        return lambda *args: FakeFunction(self._eth, name, args)


class FakeContract:
    def __init__(self, eth):
        self.functions = FakeFunctions(eth)


class FakeEth:
    def __init__(self, *, balance=0, receipt=None, error=None):
        self.balance = balance
        self.receipt = receipt if receipt is not None else {"status": 1}
        self.error = error
        self.seen = []
        self.sent = []

    @property
    def gas_price(self):
        return _value(10**9)

    @property
    def chain_id(self):
        return _value(10143)

    async def get_balance(self, address):
        self.seen.append(("get_balance", address))
        if self.error is not None:
            raise self.error
        return self.balance

    async def get_transaction_count(self, address, block):
        return 7

    def contract(self, address, abi):
        self.seen.append(("contract", address))
        return FakeContract(self)

    async def send_raw_transaction(self, raw):
        self.sent.append(raw)
        return TX_HASH

    async def wait_for_transaction_receipt(self, tx_hash, timeout):
        if self.error is not None:
            raise self.error
        return self.receipt


class FakeWeb3:
    def __init__(self, eth):
        self.eth = eth


def _client(eth):
    return ChainClient("Monad", ACCOUNT, web3=FakeWeb3(eth))


def test_requires_rpc_url_or_web3():
    with pytest.raises(ValueError):
        ChainClient("Monad", ACCOUNT)


@pytest.mark.asyncio
async def test_get_balance_defaults_to_own_address():
    eth = FakeEth(balance=123)
    client = _client(eth)
    assert client.address == ACCOUNT.address
    assert await client.get_balance() == 123
    assert eth.seen == [("get_balance", ACCOUNT.address)]


@pytest.mark.asyncio
async def test_call_contract_method():
    eth = FakeEth()
    result = await _client(eth).call_contract_method(TOKEN, ERC20_ABI, "balanceOf", [ACCOUNT.address])
    assert result == 42
    assert eth.seen[-1] == ("call", "balanceOf", (ACCOUNT.address,), {"from": ACCOUNT.address})


@pytest.mark.asyncio
async def test_send_transaction_signs_locally():
    eth = FakeEth()
    tx_hash = await _client(eth).send_transaction(TOKEN, 5, b"\x01\x02", gas_limit=21000 * 3)
    assert tx_hash == "0x" + "ab" * 32
    assert len(eth.sent) == 1
    assert isinstance(eth.sent[0], (bytes, bytearray))


@pytest.mark.asyncio
async def test_transact_contract_method_builds_and_sends():
    eth = FakeEth()
    tx_hash = await _client(eth).transact_contract_method(TOKEN, ERC20_ABI, "approve", [TOKEN, 1], gas_limit=100000)
    assert tx_hash == "0x" + "ab" * 32
    assert ("build", "approve", (TOKEN, 1)) in eth.seen


@pytest.mark.asyncio
async def test_unreachable_rpc_is_mapped():
    client = _client(FakeEth(error=OSError("connection refused")))
    with pytest.raises(ChainUnreachableError) as excinfo:
        await client.get_balance()
    assert excinfo.value.network == "Monad"


@pytest.mark.asyncio
async def test_contract_revert_is_mapped():
    client = _client(FakeEth(error=ContractLogicError("execution reverted")))
    with pytest.raises(TransactionRevertedError):
        await client.call_contract_method(TOKEN, ERC20_ABI, "balanceOf", [ACCOUNT.address])


@pytest.mark.asyncio
async def test_receipt_timeout_is_mapped():
    client = _client(FakeEth(error=TimeExhausted()))
    with pytest.raises(ChainClientError) as excinfo:
        await client.wait_for_confirmation("0xabc")
    assert "Timed out" in str(excinfo.value)


@pytest.mark.asyncio
async def test_reverted_receipt_raises():
    client = _client(FakeEth(receipt={"status": 0}))
    with pytest.raises(TransactionRevertedError):
        await client.wait_for_confirmation("0xabc")


@pytest.mark.asyncio
async def test_successful_receipt_is_returned():
    client = _client(FakeEth(receipt={"status": 1, "blockNumber": 9}))
    assert await client.wait_for_confirmation("0xabc") == {"status": 1, "blockNumber": 9}
