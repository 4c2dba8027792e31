"""
Transport protocol for Soroban JSON-RPC calls.

Defines the seam where concrete HTTP implementations plug in. The
JSON-RPC client depends on this protocol, not on httpx directly, so the
transport can be swapped for test fakes without editing client logic.

Concrete implementations:
    - HttpxTransport (default, one shared httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

Connection handle:
    HttpxTransport creates its ``httpx.AsyncClient`` lazily on the first
    request and reuses it for every later request. The client is never
    reconfigured after creation, so concurrent in-flight requests from
    independent operations can share it. ``aclose()`` tears it down; the
    owning LedgerContext calls it on shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


@runtime_checkable
class JsonRpcTransport(Protocol):
    """Async transport for JSON-RPC POST requests."""

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON-RPC request and return the parsed response.

        Args:
            url: The JSON-RPC endpoint URL.
            payload: The JSON-RPC request body (jsonrpc, id, method, params).

        Returns:
            Parsed JSON response as a dict.

        Raises:
            Exception: On transport-level failures (connection refused,
                timeout, TLS error, non-2xx status). The JSON-RPC client
                lets these propagate.
        """
        ...


class HttpxTransport:
    """Default transport backed by a single, lazily created httpx.AsyncClient.

    Args:
        timeout: Request timeout in seconds.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    @property
    def timeout(self) -> float:
        return self._timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    logger.debug("creating shared httpx client (timeout=%ss)", self._timeout)
                    self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send JSON-RPC request via the shared httpx client."""
        client = await self._get_client()
        response = await client.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result

    async def aclose(self) -> None:
        """Close the shared client. Safe to call more than once."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
