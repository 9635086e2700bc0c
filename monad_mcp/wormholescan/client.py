"""
Thin HTTP client for the Wormholescan operations endpoint.

Only the read-only operations listing is used. HTTP and payload failures are
mapped to internal exceptions the history tool turns into messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from monad_mcp.config import MonadConfig, default_config

logger = logging.getLogger(__name__)


class WormholescanError(Exception):
    """Base exception for Wormholescan API errors."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WormholescanUnreachableError(WormholescanError):
    """Raised when the indexer cannot be reached."""


@dataclass(frozen=True, slots=True)
class OperationsQuery:
    address: str
    source_chain: int
    target_chain: int
    app_id: str = "GENERIC_RELAYER"
    page: int = 0
    page_size: int = 10
    sort_order: str = "DESC"

    def to_params(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "sortOrder": self.sort_order,
            "address": self.address,
            "appId": self.app_id,
            "sourceChain": self.source_chain,
            "targetChain": self.target_chain,
        }


class WormholescanClient:
    """Async client for bridge operation history."""

    def __init__(
        self,
        config: MonadConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.wormholescan_url.rstrip("/"), timeout=self.config.timeout
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
        except httpx.RequestError as exc:
            logger.warning("Wormholescan unreachable for path %s", path)
            raise WormholescanUnreachableError("Wormholescan unreachable") from exc

        if response.status_code >= 400:
            message: Optional[str] = None
            try:
                data = response.json()
            except ValueError:
                data = None
            if isinstance(data, dict) and isinstance(data.get("message"), str):
                message = data["message"]
            raise WormholescanError(
                message or f"Wormholescan returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise WormholescanError(
                "Unexpected response from Wormholescan.", status_code=response.status_code
            ) from exc

    async def fetch_operations(self, query: OperationsQuery) -> List[Dict[str, Any]]:
        """Return the operation records matching ``query`` (possibly empty)."""
        data = await self._request("/api/v1/operations", params=query.to_params())
        if not isinstance(data, dict):
            raise WormholescanError("Unexpected response from Wormholescan.")
        operations = data.get("operations") or []
        if not isinstance(operations, list):
            raise WormholescanError("Unexpected response from Wormholescan.")
        return [op for op in operations if isinstance(op, dict)]
