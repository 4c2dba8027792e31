"""Tests for configuration loading, the ledger context and explorer links."""

import pytest
from pydantic import ValidationError

from escrow_control import context as context_module
from escrow_control.balance import HorizonBalanceReader
from escrow_control.config import (
    DEFAULT_HORIZON_URL,
    DEFAULT_NETWORK_PASSPHRASE,
    DEFAULT_RPC_URL,
    EscrowConfig,
)
from escrow_control.context import LedgerContext, close_default_context, get_default_context
from escrow_control.errors import ConfigurationMissing
from escrow_control.explorer import explorer_link
from escrow_control.soroban.jsonrpc_client import JsonRpcClient
from escrow_control.soroban.transport import HttpxTransport

CONTRACT_ID = "CCEXAMPLE"

ENV_VARS = (
    "SOROBAN_RPC_URL",
    "ESCROW_CONTRACT_ID",
    "NETWORK_PASSPHRASE",
    "HORIZON_URL",
    "EXPLORER_NETWORK",
    "RPC_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestFromEnv:
    def test_defaults(self) -> None:
        config = EscrowConfig.from_env()
        assert config.rpc_url == DEFAULT_RPC_URL
        assert config.network_passphrase == DEFAULT_NETWORK_PASSPHRASE
        assert config.horizon_url == DEFAULT_HORIZON_URL
        assert config.contract_id is None
        assert config.explorer_network == "testnet"
        assert config.rpc_timeout_seconds == 30.0

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOROBAN_RPC_URL", "http://localhost:8000/soroban/rpc")
        monkeypatch.setenv("ESCROW_CONTRACT_ID", CONTRACT_ID)
        monkeypatch.setenv("NETWORK_PASSPHRASE", "Standalone Network ; February 2017")
        monkeypatch.setenv("HORIZON_URL", "http://localhost:8000")
        monkeypatch.setenv("EXPLORER_NETWORK", "public")
        monkeypatch.setenv("RPC_TIMEOUT_SECONDS", "5")
        config = EscrowConfig.from_env()
        assert config.rpc_url == "http://localhost:8000/soroban/rpc"
        assert config.contract_id == CONTRACT_ID
        assert config.network_passphrase == "Standalone Network ; February 2017"
        assert config.horizon_url == "http://localhost:8000"
        assert config.explorer_network == "public"
        assert config.rpc_timeout_seconds == 5.0

    def test_empty_values_are_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ESCROW_CONTRACT_ID", "  ")
        monkeypatch.setenv("SOROBAN_RPC_URL", "")
        config = EscrowConfig.from_env()
        assert config.contract_id is None
        assert config.rpc_url == DEFAULT_RPC_URL

    def test_surrounding_whitespace_stripped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ESCROW_CONTRACT_ID", f" {CONTRACT_ID}\n")
        assert EscrowConfig.from_env().contract_id == CONTRACT_ID

    @pytest.mark.parametrize("bad", ["0", "-3", "soon"])
    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch, bad: str) -> None:
        monkeypatch.setenv("RPC_TIMEOUT_SECONDS", bad)
        with pytest.raises(ValidationError):
            EscrowConfig.from_env()

    def test_fields_by_name(self) -> None:
        config = EscrowConfig(contract_id=CONTRACT_ID, rpc_timeout_seconds=2.5)
        assert config.contract_id == CONTRACT_ID
        assert config.rpc_timeout_seconds == 2.5

    def test_frozen(self) -> None:
        config = EscrowConfig()
        with pytest.raises(ValidationError):
            config.contract_id = CONTRACT_ID  # type: ignore[misc]


class TestRequireContractId:
    def test_missing(self) -> None:
        with pytest.raises(ConfigurationMissing, match="Contract ID not configured"):
            EscrowConfig().require_contract_id()

    def test_present(self) -> None:
        assert EscrowConfig(contract_id=CONTRACT_ID).require_contract_id() == CONTRACT_ID


class TestLedgerContext:
    @pytest.mark.asyncio
    async def test_from_config(self) -> None:
        config = EscrowConfig(rpc_url="http://rpc.local", rpc_timeout_seconds=7.0)
        ctx = LedgerContext.from_config(config)
        assert isinstance(ctx.client, JsonRpcClient)
        assert ctx.client.url == "http://rpc.local"
        assert isinstance(ctx.client.transport, HttpxTransport)
        assert ctx.client.transport.timeout == 7.0
        await ctx.aclose()

    @pytest.mark.asyncio
    async def test_aclose_without_transport(self) -> None:
        ctx = LedgerContext(config=EscrowConfig(), client=object())  # type: ignore[arg-type]
        await ctx.aclose()

    @pytest.mark.asyncio
    async def test_default_context_is_shared(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(context_module, "_default_context", None)
        monkeypatch.setenv("ESCROW_CONTRACT_ID", CONTRACT_ID)
        first = get_default_context()
        assert get_default_context() is first
        assert first.config.contract_id == CONTRACT_ID
        await close_default_context()
        assert context_module._default_context is None


class TestBalanceReaderFromConfig:
    def test_uses_horizon_url_and_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HORIZON_URL", "http://localhost:8000/")
        monkeypatch.setenv("RPC_TIMEOUT_SECONDS", "4")
        reader = HorizonBalanceReader.from_config(EscrowConfig.from_env())
        assert reader.horizon_url == "http://localhost:8000"
        assert reader.timeout_s == 4.0

    def test_defaults_to_testnet_horizon(self) -> None:
        reader = HorizonBalanceReader.from_config(EscrowConfig())
        assert reader.horizon_url == DEFAULT_HORIZON_URL


class TestExplorerLink:
    def test_testnet(self) -> None:
        assert explorer_link("abc123") == "https://stellar.expert/explorer/testnet/tx/abc123"

    def test_network_segment(self) -> None:
        assert explorer_link("abc", "public") == "https://stellar.expert/explorer/public/tx/abc"
