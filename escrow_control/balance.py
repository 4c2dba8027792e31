"""
Native balance lookup via Horizon.

A separate, simpler read path from the Soroban pipeline. Never raises:
a missing account, a missing native balance entry, a malformed address,
or any transport or parsing failure all degrade to ``"0"``.
"""

from __future__ import annotations

import logging

import httpx

from escrow_control.config import EscrowConfig

logger = logging.getLogger(__name__)

ZERO_BALANCE = "0"


class HorizonBalanceReader:
    """Reads native-asset balances from a Horizon server.

    Args:
        horizon_url: Horizon base URL.
        timeout_s: Request timeout in seconds.
    """

    def __init__(self, horizon_url: str, *, timeout_s: float = 30.0) -> None:
        self._horizon_url = horizon_url.rstrip("/")
        self._timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: EscrowConfig) -> HorizonBalanceReader:
        """Reader for the configured Horizon endpoint and timeout."""
        return cls(config.horizon_url, timeout_s=config.rpc_timeout_seconds)

    @property
    def horizon_url(self) -> str:
        return self._horizon_url

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    async def get_native_balance(self, address: str) -> str:
        """Return the account's native balance as a decimal string, or "0"."""
        url = f"{self._horizon_url}/accounts/{address}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
            if response.status_code == 404:
                logger.info("account %s not found on horizon", address)
                return ZERO_BALANCE
            response.raise_for_status()
            account = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("failed to get balance for %r: %s", address, exc)
            return ZERO_BALANCE

        balances = account.get("balances") if isinstance(account, dict) else None
        for entry in balances or []:
            if isinstance(entry, dict) and entry.get("asset_type") == "native":
                return str(entry.get("balance") or ZERO_BALANCE)
        return ZERO_BALANCE
