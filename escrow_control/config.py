"""
Runtime configuration for escrow-control.

Loaded from the process environment by pydantic-settings, once at
startup, and never reloaded. The contract id is optional at load time:
its absence is reported by ``require_contract_id()`` as
ConfigurationMissing on each operation, not as a startup failure.

Environment variables:
    SOROBAN_RPC_URL       Soroban RPC endpoint.
    ESCROW_CONTRACT_ID    Escrow contract id (C... strkey).
    NETWORK_PASSPHRASE    Network passphrase used for signing.
    HORIZON_URL           Horizon endpoint for balance lookups.
    EXPLORER_NETWORK      Network segment for explorer links.
    RPC_TIMEOUT_SECONDS   HTTP timeout for RPC and Horizon calls.

Empty or blank values are treated as unset.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from escrow_control.errors import ConfigurationMissing

DEFAULT_RPC_URL = "https://soroban-testnet.stellar.org"
DEFAULT_NETWORK_PASSPHRASE = "Test SDF Network ; September 2015"
DEFAULT_HORIZON_URL = "https://horizon-testnet.stellar.org"
DEFAULT_EXPLORER_NETWORK = "testnet"
DEFAULT_RPC_TIMEOUT_SECONDS = 30.0


class EscrowConfig(BaseSettings):
    """Immutable configuration snapshot.

    Fields may also be passed by name, which is how tests and embedding
    applications build a config without touching the environment.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        env_ignore_empty=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    rpc_url: str = Field(default=DEFAULT_RPC_URL, validation_alias="SOROBAN_RPC_URL")
    contract_id: str | None = Field(default=None, validation_alias="ESCROW_CONTRACT_ID")
    network_passphrase: str = Field(
        default=DEFAULT_NETWORK_PASSPHRASE, validation_alias="NETWORK_PASSPHRASE"
    )
    horizon_url: str = Field(default=DEFAULT_HORIZON_URL, validation_alias="HORIZON_URL")
    explorer_network: str = Field(
        default=DEFAULT_EXPLORER_NETWORK, validation_alias="EXPLORER_NETWORK"
    )
    rpc_timeout_seconds: float = Field(
        default=DEFAULT_RPC_TIMEOUT_SECONDS, gt=0, validation_alias="RPC_TIMEOUT_SECONDS"
    )

    @field_validator("contract_id", mode="before")
    @classmethod
    def _blank_contract_id_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_env(cls) -> EscrowConfig:
        """Build a config from the current process environment.

        Raises:
            pydantic.ValidationError: If a variable has an invalid value
                (e.g. a non-positive RPC_TIMEOUT_SECONDS).
        """
        return cls()

    def require_contract_id(self) -> str:
        """Return the contract id or raise ConfigurationMissing."""
        if not self.contract_id:
            raise ConfigurationMissing()
        return self.contract_id
