"""
Concrete signing delegates.

    - KeypairDelegate: signs with a local stellar_sdk Keypair. For
      development, scripted use and tests against a local network.
    - HttpWalletDelegate: forwards the three delegate calls to an HTTP
      bridge in front of a wallet extension.

Wallet bridge protocol (JSON over POST, relative to base_url):

    POST /is-allowed        {}                         → {"isAllowed": bool}
    POST /request-access    {}                         → {"address": "G..."}
    POST /sign-transaction  {"xdr", "networkPassphrase", "address"}
                                                       → {"signedTxXdr": "...",
                                                          "signerAddress": "G..."}

    Any response may instead be {"error": "...", "declined": bool}.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from stellar_sdk import Keypair, TransactionEnvelope

from escrow_control.soroban.signer import AccessResult, AllowedResult, SignResult

logger = logging.getLogger(__name__)


class KeypairDelegate:
    """Signing delegate backed by a local keypair.

    Args:
        keypair: Keypair holding a secret seed.
    """

    def __init__(self, keypair: Keypair) -> None:
        if not keypair.can_sign():
            raise ValueError("keypair must hold a secret seed")
        self._keypair = keypair

    @classmethod
    def from_secret(cls, secret: str) -> KeypairDelegate:
        return cls(Keypair.from_secret(secret))

    @property
    def address(self) -> str:
        return self._keypair.public_key

    async def is_allowed(self) -> AllowedResult:
        return AllowedResult(allowed=True)

    async def request_access(self) -> AccessResult:
        return AccessResult(address=self._keypair.public_key)

    async def sign_transaction(
        self,
        tx_xdr: str,
        *,
        network_passphrase: str,
        address: str,
    ) -> SignResult:
        if address != self._keypair.public_key:
            return SignResult(error=f"address {address} does not match signing key")
        try:
            envelope = TransactionEnvelope.from_xdr(tx_xdr, network_passphrase)
        except Exception as exc:
            return SignResult(error=f"invalid transaction XDR: {exc}")
        envelope.sign(self._keypair)
        return SignResult(
            signed_tx_xdr=envelope.to_xdr(),
            signer_address=self._keypair.public_key,
        )


class HttpWalletDelegate:
    """Signing delegate that talks to a wallet bridge over HTTP.

    Transport failures are reported as results with ``error`` set, never
    raised: an unreachable bridge is indistinguishable from an absent
    wallet.

    Args:
        base_url: Bridge base URL.
        timeout_s: Request timeout in seconds. Signing waits on a human,
            so the default is generous.
        client: Optional shared httpx.AsyncClient.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._client = client

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}/{path}"
        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self._timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                    response = await client.post(url, json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("wallet bridge %s failed: %s", path, exc)
            return {"error": f"wallet bridge unavailable: {exc}"}
        if not isinstance(data, dict):
            return {"error": "wallet bridge returned a non-object response"}
        return data

    async def is_allowed(self) -> AllowedResult:
        data = await self._post("is-allowed", {})
        if data.get("error"):
            return AllowedResult(allowed=False, error=str(data["error"]))
        return AllowedResult(allowed=bool(data.get("isAllowed", False)))

    async def request_access(self) -> AccessResult:
        data = await self._post("request-access", {})
        if data.get("error"):
            return AccessResult(error=str(data["error"]))
        return AccessResult(address=data.get("address"))

    async def sign_transaction(
        self,
        tx_xdr: str,
        *,
        network_passphrase: str,
        address: str,
    ) -> SignResult:
        data = await self._post(
            "sign-transaction",
            {
                "xdr": tx_xdr,
                "networkPassphrase": network_passphrase,
                "address": address,
            },
        )
        if data.get("error"):
            return SignResult(
                error=str(data["error"]),
                declined=bool(data.get("declined", False)),
            )
        return SignResult(
            signed_tx_xdr=data.get("signedTxXdr"),
            signer_address=data.get("signerAddress"),
        )
