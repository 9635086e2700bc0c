"""
Tool registration and dispatch for the MCP surface.

Every tool is declared here with its input schema. ``Dispatcher.dispatch``
is the single entry point for invocations and never raises: unknown tools,
invalid arguments and handler failures all come back as text content, the
same wire shape as a success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from monad_mcp.chain import ChainClientError
from monad_mcp.config import MAX_BRIDGE_AMOUNT, ConfigError
from monad_mcp.metrics import MetricsRecorder, default_metrics
from monad_mcp.registry import ToolNotFoundError, ToolRegistry
from monad_mcp.tools import (
    InsufficientBalanceError,
    bridge_monad_to_sepolia_wmon,
    bridge_sepolia_wmon_to_monad,
    get_eth_balance,
    get_last_bridge_transactions,
    get_mon_balance,
    get_wallet_address,
    get_wmon_sepolia_balance,
)
from monad_mcp.tools.calldata import EncodingError
from monad_mcp.tools.validators import (
    AMOUNT_PATTERN,
    NUMERIC_STRING,
    FieldSpec,
    ValidationError,
    at_most,
    greater_than,
    matches,
    max_decimals,
    to_json_schema,
    validate_arguments,
)
from monad_mcp.wormholescan import WormholescanError

logger = logging.getLogger(__name__)

ERROR_MARKER = "❌"
MAX_AMOUNT_MESSAGE = f"Maximum amount is {MAX_BRIDGE_AMOUNT}"
DECIMALS_MESSAGE = "Amount supports at most 18 decimal places"
# Metrics key for names that are not registered; client input never becomes a key.
UNKNOWN_TOOL_METRIC = "<unknown>"

# Failures reported without a traceback.
EXPECTED_ERRORS = (
    ChainClientError,
    WormholescanError,
    InsufficientBalanceError,
    ConfigError,
    EncodingError,
)


@dataclass(frozen=True, slots=True)
class TextContent:
    text: str
    type: str = "text"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True, slots=True)
class ToolResult:
    """
    Outcome of one dispatch.

    ``is_error`` is kept for callers inside the process; ``to_dict`` renders
    both outcomes identically, so clients detect failure from the text.
    """

    content: List[TextContent] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text)])

    @classmethod
    def failure(cls, text: str) -> "ToolResult":
        if not text.startswith(ERROR_MARKER):
            text = f"{ERROR_MARKER} {text}"
        return cls(content=[TextContent(text)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> Dict[str, Any]:
        return {"content": [block.to_dict() for block in self.content]}


SEPOLIA_AMOUNT_SCHEMA = {
    "amount": FieldSpec(
        kind=NUMERIC_STRING,
        description="The amount of wMON to bridge from Sepolia to the Monad network",
        missing_message="Amount is required",
        invalid_message="Amount must be a valid number",
        constraints=(
            greater_than(0, "Amount must be greater than 0"),
            at_most(MAX_BRIDGE_AMOUNT, MAX_AMOUNT_MESSAGE),
            max_decimals(18, DECIMALS_MESSAGE),
        ),
    )
}

MONAD_AMOUNT_SCHEMA = {
    "amounts": FieldSpec(
        kind=NUMERIC_STRING,
        description="The amount of MON to bridge from Monad to Sepolia wMON",
        missing_message="Amount is required",
        invalid_message="Invalid amount format",
        constraints=(
            matches(AMOUNT_PATTERN, "Invalid amount format"),
            at_most(MAX_BRIDGE_AMOUNT, MAX_AMOUNT_MESSAGE),
            max_decimals(18, DECIMALS_MESSAGE),
        ),
    )
}


def build_registry() -> ToolRegistry:
    """Register every tool exposed by the server, in advertised order."""
    registry = ToolRegistry()
    registry.register(
        "get-wallet-address",
        "Get wallet address on Sepolia from a private key (starts with 0x)",
        {},
        get_wallet_address,
        failure_message="Failed to retrieve wallet address from private key.",
    )
    registry.register(
        "get-eth-balance",
        "Get ETH balance for my address on Sepolia testnet",
        {},
        get_eth_balance,
        failure_message="Failed to retrieve ETH balance.",
    )
    registry.register(
        "get-mon-balance",
        "Get MON balance for my address on Monad testnet",
        {},
        get_mon_balance,
        failure_message="Failed to retrieve MON balance.",
    )
    registry.register(
        "get-wmon-sepolia-balance",
        "Get Wrapped MONAD (WMON) balance for my address on Sepolia testnet",
        {},
        get_wmon_sepolia_balance,
        failure_message="Failed to retrieve WMON balance on Sepolia.",
    )
    registry.register(
        "bridge-sepolia-wmon-to-monad",
        "Bridge Token Wrapped Monad (WMON) on Sepolia to MON Native on MONAD Chain",
        SEPOLIA_AMOUNT_SCHEMA,
        bridge_sepolia_wmon_to_monad,
        failure_message="Failed to bridge wMON to MONAD.",
    )
    registry.register(
        "bridge-monad-to-sepolia-wmon",
        "Bridge MON from Monad to Sepolia wMON",
        MONAD_AMOUNT_SCHEMA,
        bridge_monad_to_sepolia_wmon,
        failure_message="Failed to bridge MON to Sepolia wMON.",
    )
    registry.register(
        "get-10-last-bridge-transaction",
        "Get and view the last 10 bridge transactions from Sepolia to Monad or Monad to Sepolia",
        {},
        get_last_bridge_transactions,
        failure_message="Failed to fetch bridge transactions.",
    )
    return registry


def list_tools(registry: ToolRegistry) -> List[Dict[str, Any]]:
    """Return the tools/list payload in registration order."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": to_json_schema(tool.input_schema),
        }
        for tool in registry.definitions()
    ]


class Dispatcher:
    """Look up, validate and run tools against one wallet context."""

    def __init__(
        self,
        registry: ToolRegistry,
        context: Any,
        *,
        metrics: MetricsRecorder = default_metrics,
    ) -> None:
        self.registry = registry
        self.context = context
        self.metrics = metrics

    def _fail(
        self,
        name: str,
        text: str,
        *,
        stage: str,
        error: Optional[str] = None,
        metric_name: Optional[str] = None,
    ) -> ToolResult:
        logger.warning(
            "tool=%s outcome=error stage=%s error=%s",
            name,
            stage,
            error or text,
            extra={"tool": name, "error": error or text},
        )
        self.metrics.record_tool(metric_name or name, success=False, stage=stage)
        return ToolResult.failure(text)

    def _handler_failure(self, name: str, failure_message: Optional[str], exc: Exception) -> ToolResult:
        message = failure_message or f"Tool {name} failed."
        return self._fail(name, f"{ERROR_MARKER} {message}\n\nError: {exc}", stage="handler", error=str(exc))

    async def dispatch(self, name: str, raw_args: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """Run one tool invocation to completion; never raises."""
        try:
            tool = self.registry.lookup(name)
        except ToolNotFoundError as exc:
            return self._fail(str(name), f"{ERROR_MARKER} {exc}", stage="lookup", metric_name=UNKNOWN_TOOL_METRIC)

        if raw_args is None:
            raw_args = {}
        if not isinstance(raw_args, Mapping):
            return self._fail(name, f"{ERROR_MARKER} Invalid arguments: expected an object.", stage="validation")

        ignored = set(raw_args) - set(tool.input_schema)
        if ignored:
            logger.debug("tool=%s ignoring undeclared arguments %s", name, sorted(ignored))

        try:
            args = validate_arguments(tool.input_schema, raw_args)
        except ValidationError as exc:
            return self._fail(
                name,
                f"{ERROR_MARKER} Invalid input for {exc.field_name}: {exc.message}",
                stage="validation",
                error=exc.message,
            )

        try:
            outcome = await tool.handler(self.context, **args)
        except EXPECTED_ERRORS as exc:
            return self._handler_failure(tool.name, tool.failure_message, exc)
        except Exception as exc:
            logger.exception("Unexpected error in tool %s", name)
            return self._handler_failure(tool.name, tool.failure_message, exc)

        result = outcome if isinstance(outcome, ToolResult) else ToolResult.success(str(outcome))
        if result.is_error:
            self.metrics.record_tool(name, success=False, stage="handler")
        else:
            logger.info("tool=%s outcome=success", name, extra={"tool": name})
            self.metrics.record_tool(name, success=True)
        return result
