import pytest

from monad_mcp.chain import ChainClientError
from monad_mcp.context import WalletContext
from monad_mcp.mcp import Dispatcher, ToolResult, build_registry
from monad_mcp.metrics import MetricsRecorder, default_metrics
from monad_mcp.registry import ToolRegistry
from monad_mcp.tools.validators import FieldSpec

from conftest import ETHER, StubChainClient


@pytest.mark.asyncio
async def test_unknown_tool_is_reported_not_raised(dispatcher):
    result = await dispatcher.dispatch("not-a-tool", {})
    assert result.is_error
    assert result.text == "❌ Unknown tool: not-a-tool"
    assert default_metrics.snapshot()["failure_stage"] == {"lookup": 1}


@pytest.mark.asyncio
async def test_amount_above_limit_never_reaches_the_chain(dispatcher, sepolia):
    result = await dispatcher.dispatch("bridge-sepolia-wmon-to-monad", {"amount": "15"})
    assert result.is_error
    assert "Maximum amount is 10" in result.text
    assert sepolia.calls == []


@pytest.mark.asyncio
async def test_missing_amount(dispatcher, sepolia):
    result = await dispatcher.dispatch("bridge-sepolia-wmon-to-monad", {})
    assert result.text == "❌ Invalid input for amount: Amount is required"
    assert sepolia.calls == []


@pytest.mark.asyncio
async def test_insufficient_wmon_stops_before_approve(dispatcher, sepolia):
    result = await dispatcher.dispatch("bridge-sepolia-wmon-to-monad", {"amount": "5"})
    assert result.is_error
    assert "insufficient" in result.text
    assert "You need 5.0 wMON" in result.text
    assert "you only have 3.0 wMON" in result.text
    assert sepolia.count("call") == 1
    assert sepolia.count("transact") == 0


@pytest.mark.asyncio
async def test_invalid_monad_amount_format(dispatcher, monad):
    result = await dispatcher.dispatch("bridge-monad-to-sepolia-wmon", {"amounts": "-1"})
    assert result.text == "❌ Invalid input for amounts: Invalid amount format"
    assert monad.calls == []


@pytest.mark.asyncio
async def test_non_mapping_arguments(dispatcher):
    result = await dispatcher.dispatch("get-eth-balance", ["amount"])  # type: ignore[arg-type]
    assert result.is_error
    assert "expected an object" in result.text


@pytest.mark.asyncio
async def test_undeclared_arguments_are_ignored(dispatcher):
    result = await dispatcher.dispatch("get-wallet-address", {"verbose": True})
    assert not result.is_error
    assert "0x52908400098527886E0F7030069857D2E4169EE7" in result.text


@pytest.mark.asyncio
async def test_chain_error_becomes_failure_text(config, history):
    broken = StubChainClient(fail_on={"get_balance": ChainClientError("Sepolia RPC unreachable")})
    context = WalletContext(sepolia=broken, monad=StubChainClient(), history=history, config=config)
    result = await Dispatcher(build_registry(), context).dispatch("get-eth-balance")
    assert result.is_error
    assert result.text == "❌ Failed to retrieve ETH balance.\n\nError: Sepolia RPC unreachable"


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_failure_text(context):
    async def explode(ctx):
        raise RuntimeError("kaboom")

    registry = ToolRegistry()
    registry.register("explode", "Always fails", {}, explode)
    result = await Dispatcher(registry, context).dispatch("explode")
    assert result.is_error
    assert result.text == "❌ Tool explode failed.\n\nError: kaboom"


@pytest.mark.asyncio
async def test_handler_receives_validated_arguments(context):
    seen = {}

    async def echo(ctx, label):
        seen["ctx"] = ctx
        seen["label"] = label
        return f"label={label}"

    registry = ToolRegistry()
    registry.register("echo", "Echo", {"label": FieldSpec()}, echo)
    result = await Dispatcher(registry, context).dispatch("echo", {"label": "hi"})
    assert result.text == "label=hi"
    assert seen == {"ctx": context, "label": "hi"}


@pytest.mark.asyncio
async def test_success_and_failure_share_wire_shape(dispatcher):
    ok = await dispatcher.dispatch("get-eth-balance")
    bad = await dispatcher.dispatch("get-eth-balance", ["x"])  # type: ignore[arg-type]
    assert set(ok.to_dict()) == set(bad.to_dict()) == {"content"}
    assert ok.to_dict()["content"][0]["type"] == "text"
    assert bad.to_dict()["content"][0]["text"].startswith("❌")


@pytest.mark.asyncio
async def test_metrics_are_recorded_per_tool(context):
    metrics = MetricsRecorder()
    dispatcher = Dispatcher(build_registry(), context, metrics=metrics)
    await dispatcher.dispatch("get-mon-balance")
    await dispatcher.dispatch("bridge-monad-to-sepolia-wmon", {"amounts": "11"})
    snapshot = metrics.snapshot()
    assert snapshot["tool_success"] == {"get-mon-balance": 1}
    assert snapshot["tool_error"] == {"bridge-monad-to-sepolia-wmon": 1}
    assert snapshot["failure_stage"] == {"validation": 1}


def test_failure_prefix_is_not_doubled():
    assert ToolResult.failure("❌ boom").text == "❌ boom"
    assert ToolResult.failure("boom").text == "❌ boom"
    assert ToolResult.success("fine").is_error is False


@pytest.mark.asyncio
async def test_monad_balance_uses_monad_client(dispatcher, sepolia, monad):
    monad.balance = 2 * ETHER
    result = await dispatcher.dispatch("get-mon-balance")
    assert "**Balance:** 2.0 MON" in result.text
    assert monad.count("get_balance") == 1
    assert sepolia.count("get_balance") == 0


@pytest.mark.asyncio
async def test_underscore_amount_is_not_a_number(dispatcher, sepolia):
    result = await dispatcher.dispatch("bridge-sepolia-wmon-to-monad", {"amount": "1_0"})
    assert result.text == "❌ Invalid input for amount: Amount must be a valid number"
    assert sepolia.calls == []


@pytest.mark.asyncio
async def test_unhashable_tool_name_is_reported_not_raised(dispatcher):
    result = await dispatcher.dispatch(["x"], {})  # type: ignore[arg-type]
    assert result.is_error
    assert result.text == "❌ Unknown tool: ['x']"


@pytest.mark.asyncio
async def test_unknown_names_share_one_metrics_key(dispatcher):
    for name in ("a", "b", "c"):
        await dispatcher.dispatch(name, {})
    snapshot = default_metrics.snapshot()
    assert snapshot["tool_error"] == {"<unknown>": 3}
    assert snapshot["failure_stage"] == {"lookup": 3}
