"""JSON-RPC gateway for the Monad MCP tools, plus its FastAPI HTTP surface."""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from mcp.types import LATEST_PROTOCOL_VERSION

from monad_mcp.config import MonadConfig, default_config
from monad_mcp.context import build_context
from monad_mcp.mcp import Dispatcher, build_registry, list_tools
from monad_mcp.metrics import default_metrics

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"
MCP_SERVER_NAME = "monad-mcp"
MCP_SERVER_VERSION = APP_VERSION
HEALTH_STATUS = {"status": "ok"}

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in ("tool", "request_id", "error"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: MonadConfig = default_config) -> None:
    """Send logs to stderr; stdout is reserved for the stdio transport."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    if config.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def negotiate_protocol_version(requested: str) -> str:
    """Echo a version the SDK supports, otherwise offer the latest one."""
    return requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION


def advertised_tools(dispatcher: Dispatcher) -> List[str]:
    """Tool names announced at initialize; always the registered set."""
    return dispatcher.registry.names()


async def handle_message(
    body: Any, dispatcher: Dispatcher, *, request_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Handle one decoded JSON-RPC message.

    Supported methods:
      - initialize
      - list_tools / tools/list
      - call_tool / tools/call
      - ping

    Returns the response payload, or None for notifications.
    """
    default_metrics.incr_request()
    if not isinstance(body, dict):
        return jsonrpc_error_payload(None, INVALID_REQUEST, "Invalid request")

    method = body.get("method")
    rpc_id = body.get("id")
    if not isinstance(method, str) or not method:
        return jsonrpc_error_payload(rpc_id, INVALID_REQUEST, "Invalid request")

    if method.startswith("notifications/") or method == "initialized":
        # Notifications never get a response body.
        logger.debug("mcp notification %s request_id=%s", method, request_id, extra={"request_id": request_id})
        return None

    raw_params = body.get("params")
    if raw_params is None:
        params: Dict[str, Any] = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")

    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        logger.debug(
            "mcp initialize requested protocol=%s request_id=%s",
            protocol_version,
            request_id,
            extra={"request_id": request_id},
        )
        return jsonrpc_success_payload(
            rpc_id,
            {
                "protocolVersion": negotiate_protocol_version(protocol_version),
                "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
                "capabilities": {"tools": {"listChanged": False, "names": advertised_tools(dispatcher)}},
            },
        )

    if method == "ping":
        return jsonrpc_success_payload(rpc_id, {})

    if method in ("list_tools", "tools/list"):
        return jsonrpc_success_payload(rpc_id, {"tools": list_tools(dispatcher.registry)})

    if method in ("call_tool", "tools/call"):
        tool_name = params.get("name") or params.get("tool")
        tool_args = params.get("arguments")
        if tool_args is None:
            tool_args = params.get("params") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        if not isinstance(tool_args, dict):
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        result = await dispatcher.dispatch(tool_name, tool_args)
        return jsonrpc_success_payload(rpc_id, result.to_dict())

    return jsonrpc_error_payload(rpc_id, METHOD_NOT_FOUND, "Method not found")


def create_app(dispatcher: Optional[Dispatcher] = None, *, config: Optional[MonadConfig] = None) -> FastAPI:
    """
    Build the HTTP app. Without an explicit dispatcher, the wallet context is
    built from configuration at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context = None
        if app.state.dispatcher is None:
            context = build_context(config)
            app.state.dispatcher = Dispatcher(build_registry(), context)
        yield
        if context is not None:
            await context.aclose()

    app = FastAPI(
        title="Monad MCP Server",
        description="Wallet, balance and bridge tools for Sepolia and Monad testnet.",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health endpoint for monitoring."""
        return JSONResponse(content=HEALTH_STATUS)

    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=default_metrics.snapshot())

    @app.post("/mcp")
    async def mcp_gateway(request: Request) -> Response:
        """JSON-RPC gateway over HTTP; same semantics as the stdio transport."""
        request_id = getattr(request.state, "request_id", None)
        start_time = time.time()
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content=jsonrpc_error_payload(None, PARSE_ERROR, "Parse error"))

        payload = await handle_message(body, request.app.state.dispatcher, request_id=request_id)
        logger.debug(
            "mcp request_id=%s duration_ms=%.2f",
            request_id,
            (time.time() - start_time) * 1000,
            extra={"request_id": request_id},
        )
        if payload is None:
            return Response(status_code=204)
        status_code = 400 if payload.get("error", {}).get("code") == INVALID_REQUEST else 200
        return JSONResponse(status_code=status_code, content=payload)

    return app


app = create_app()

# Run with: uvicorn monad_mcp.server:app
