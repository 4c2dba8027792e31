"""Tests for the Horizon native balance reader (pytest-httpx)."""

import httpx
import pytest
from pytest_httpx import HTTPXMock

from escrow_control.balance import HorizonBalanceReader

HORIZON_URL = "https://horizon.example.org"
ADDRESS = "GBRPYHIL2CI3FNQ4BXLFMNDLFJUNPU2HY3ZMFSHONUCEOASW7QC7OX2H"
ACCOUNT_URL = f"{HORIZON_URL}/accounts/{ADDRESS}"


class TestGetNativeBalance:
    @pytest.mark.asyncio
    async def test_native_balance(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=ACCOUNT_URL,
            json={
                "balances": [
                    {"asset_type": "credit_alphanum4", "asset_code": "USDC", "balance": "5.0"},
                    {"asset_type": "native", "balance": "9999.9999900"},
                ]
            },
        )
        balance = await HorizonBalanceReader(f"{HORIZON_URL}/").get_native_balance(ADDRESS)
        assert balance == "9999.9999900"

    @pytest.mark.asyncio
    async def test_no_native_entry(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ACCOUNT_URL, json={"balances": []})
        assert await HorizonBalanceReader(HORIZON_URL).get_native_balance(ADDRESS) == "0"

    @pytest.mark.asyncio
    async def test_account_not_found(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ACCOUNT_URL, status_code=404, json={"status": 404})
        assert await HorizonBalanceReader(HORIZON_URL).get_native_balance(ADDRESS) == "0"

    @pytest.mark.asyncio
    async def test_server_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ACCOUNT_URL, status_code=500)
        assert await HorizonBalanceReader(HORIZON_URL).get_native_balance(ADDRESS) == "0"

    @pytest.mark.asyncio
    async def test_transport_failure(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))
        assert await HorizonBalanceReader(HORIZON_URL).get_native_balance(ADDRESS) == "0"

    @pytest.mark.asyncio
    async def test_invalid_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ACCOUNT_URL, content=b"<html>")
        assert await HorizonBalanceReader(HORIZON_URL).get_native_balance(ADDRESS) == "0"

    def test_url_normalised(self) -> None:
        assert HorizonBalanceReader(f"{HORIZON_URL}/").horizon_url == HORIZON_URL

    @pytest.mark.asyncio
    async def test_unencodable_address(self, httpx_mock: HTTPXMock) -> None:
        assert await HorizonBalanceReader(HORIZON_URL).get_native_balance("G\x01BAD") == "0"
        assert httpx_mock.get_requests() == []
