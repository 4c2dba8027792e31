"""
Soroban JSON-RPC client — real network implementation of SorobanClient.

Translates JSON-RPC responses into AccountState / SimulationResult /
SendResult / TxStatusResult. Uses an injectable transport
(JsonRpcTransport) so the HTTP layer can be swapped for test fakes without
changing parsing logic.

No retry loops. No secrets. No Soroban logic beyond request building and
response parsing.

Methods used (JSON-RPC 2.0, params by name):
    - getLedgerEntries    {"keys": [<LedgerKey b64>]}
    - simulateTransaction {"transaction": <envelope b64>}
    - sendTransaction     {"transaction": <envelope b64>}
    - getTransaction      {"hash": <hex>}

A JSON-RPC level error ({"error": {"code": ..., "message": ...}}) raises
LedgerRpcError. Transport exceptions propagate unchanged.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from stellar_sdk import Keypair
from stellar_sdk import xdr as stellar_xdr

from escrow_control.errors import AccountNotFound, LedgerRpcError
from escrow_control.soroban.client import (
    AccountState,
    SendResult,
    SendStatus,
    SimulationResult,
    TxStatus,
    TxStatusResult,
)
from escrow_control.soroban.transport import HttpxTransport, JsonRpcTransport

logger = logging.getLogger(__name__)

# JSON-RPC request ids (single event loop, no locking needed)
_REQUEST_IDS = itertools.count(1)


class JsonRpcClient:
    """Soroban JSON-RPC client implementing the SorobanClient protocol.

    Args:
        url: The Soroban RPC endpoint URL.
        transport: Injectable transport for HTTP POST. Defaults to
            HttpxTransport. Pass a FakeTransport for testing.
    """

    def __init__(
        self,
        url: str,
        transport: JsonRpcTransport | None = None,
    ) -> None:
        self._url = url
        self._transport = transport or HttpxTransport()

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    @property
    def transport(self) -> JsonRpcTransport:
        return self._transport

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": next(_REQUEST_IDS),
            "method": method,
            "params": params,
        }
        logger.debug("soroban rpc %s -> %s", method, self._url)
        response = await self._transport.post_json(self._url, payload)
        return _unwrap(method, response)

    # -----------------------------------------------------------------
    # SorobanClient protocol methods
    # -----------------------------------------------------------------

    async def get_account(self, address: str) -> AccountState:
        """Fetch the account ledger entry and extract its sequence number."""
        key = account_ledger_key(address)
        result = await self._call("getLedgerEntries", {"keys": [key]})
        return _parse_account_entries(address, result)

    async def simulate(self, tx_xdr: str) -> SimulationResult:
        """Dry-run a transaction envelope."""
        result = await self._call("simulateTransaction", {"transaction": tx_xdr})
        return _parse_simulation(result)

    async def submit(self, signed_tx_xdr: str) -> SendResult:
        """Submit a signed transaction envelope."""
        result = await self._call("sendTransaction", {"transaction": signed_tx_xdr})
        return _parse_send(result)

    async def get_transaction(self, tx_hash: str) -> TxStatusResult:
        """Query transaction status by hash."""
        result = await self._call("getTransaction", {"hash": tx_hash})
        return _parse_transaction(result)


# =====================================================================
# Request helpers (pure)
# =====================================================================


def account_ledger_key(address: str) -> str:
    """Base64 LedgerKey for an account entry."""
    account_id = Keypair.from_public_key(address).xdr_account_id()
    key = stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.ACCOUNT,
        account=stellar_xdr.LedgerKeyAccount(account_id=account_id),
    )
    return key.to_xdr()


# =====================================================================
# Response parsing (pure functions, no I/O)
# =====================================================================


def _unwrap(method: str, response: dict[str, Any]) -> dict[str, Any]:
    """Return the JSON-RPC result object or raise LedgerRpcError."""
    error = response.get("error")
    if error is not None:
        if isinstance(error, dict):
            message = error.get("message") or "unknown rpc error"
            code = error.get("code")
        else:
            message, code = str(error), None
        raise LedgerRpcError(
            f"{method} failed: {message}",
            details={"method": method, "code": code, "error": error},
        )
    result = response.get("result")
    if not isinstance(result, dict):
        raise LedgerRpcError(
            f"{method} failed: no result in response",
            details={"method": method, "response": response},
        )
    return result


def _parse_account_entries(address: str, result: dict[str, Any]) -> AccountState:
    entries = result.get("entries") or []
    if not entries:
        raise AccountNotFound(
            f"Account not found: {address}",
            details={"address": address},
        )
    data = stellar_xdr.LedgerEntryData.from_xdr(entries[0]["xdr"])
    sequence = data.account.seq_num.sequence_number.int64
    return AccountState(account_id=address, sequence=sequence)


def _parse_simulation(result: dict[str, Any]) -> SimulationResult:
    """Parse a simulateTransaction result.

    Handles:
        - Simulation error (``error`` present) — kept verbatim
        - Successful simulation with results[0]
        - Missing/malformed fields (no transactionData or no results)
    """
    latest_ledger = result.get("latestLedger")
    error = result.get("error")
    if error:
        return SimulationResult(error=str(error), latest_ledger=latest_ledger, raw=result)

    results = result.get("results") or []
    first = results[0] if results and isinstance(results[0], dict) else {}

    try:
        min_resource_fee = int(result.get("minResourceFee") or 0)
    except (TypeError, ValueError):
        min_resource_fee = 0

    return SimulationResult(
        transaction_data=result.get("transactionData") or None,
        min_resource_fee=min_resource_fee,
        auth=tuple(first.get("auth") or ()),
        retval=first.get("xdr"),
        latest_ledger=latest_ledger,
        raw=result,
    )


def _parse_send(result: dict[str, Any]) -> SendResult:
    status_raw = result.get("status", SendStatus.ERROR)
    try:
        status = SendStatus(status_raw)
    except ValueError:
        status = SendStatus.ERROR
    return SendResult(
        hash=result.get("hash", ""),
        status=status,
        error_result_xdr=result.get("errorResultXdr"),
        raw=result,
    )


def _parse_transaction(result: dict[str, Any]) -> TxStatusResult:
    status_raw = result.get("status", TxStatus.NOT_FOUND)
    try:
        status = TxStatus(status_raw)
    except ValueError:
        # Unrecognised status: treat as not yet observed.
        status = TxStatus.NOT_FOUND
    return TxStatusResult(
        status=status,
        ledger=result.get("ledger"),
        result_xdr=result.get("resultXdr"),
        result_meta_xdr=result.get("resultMetaXdr"),
        detail=result,
    )
