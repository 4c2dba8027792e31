"""Tests for HttpxTransport — the shared, lazily created httpx client."""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from escrow_control.soroban.transport import HttpxTransport, JsonRpcTransport

RPC_URL = "https://rpc.example.com/soroban"


class TestHttpxTransport:
    def test_implements_protocol(self) -> None:
        assert isinstance(HttpxTransport(), JsonRpcTransport)

    def test_client_created_lazily(self) -> None:
        transport = HttpxTransport(timeout=5.0)
        assert transport._client is None
        assert transport.timeout == 5.0

    @pytest.mark.asyncio
    async def test_post_json_returns_parsed_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=RPC_URL, json={"result": {"ok": True}})
        transport = HttpxTransport()
        try:
            result = await transport.post_json(RPC_URL, {"method": "getHealth"})
        finally:
            await transport.aclose()
        assert result == {"result": {"ok": True}}

        request = httpx_mock.get_requests()[0]
        assert json.loads(request.content) == {"method": "getHealth"}
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_client_reused_across_calls(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=RPC_URL, json={"result": {}})
        httpx_mock.add_response(method="POST", url=RPC_URL, json={"result": {}})
        transport = HttpxTransport()
        try:
            await transport.post_json(RPC_URL, {})
            first = transport._client
            await transport.post_json(RPC_URL, {})
            assert transport._client is first
        finally:
            await transport.aclose()

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=RPC_URL, status_code=503)
        transport = HttpxTransport()
        try:
            with pytest.raises(httpx.HTTPStatusError):
                await transport.post_json(RPC_URL, {})
        finally:
            await transport.aclose()

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self) -> None:
        transport = HttpxTransport()
        await transport.aclose()
        await transport.aclose()
        assert transport._client is None
