"""
Soroban client protocol — the network boundary.

Defines the interface that the estimator, tracker and façade depend on,
not a concrete implementation. This keeps the pipeline testable and keeps
``httpx`` out of orchestration logic.

Concrete implementations:
    - JsonRpcClient (real, Soroban JSON-RPC over a JsonRpcTransport)
    - FakeClient (tests)

The protocol has four methods:
    - get_account(address) → AccountState
    - simulate(tx_xdr) → SimulationResult
    - submit(signed_tx_xdr) → SendResult
    - get_transaction(tx_hash) → TxStatusResult

All return frozen dataclasses. "Expected" ledger outcomes (simulation
errors, rejected submissions, unknown hashes) are captured in the result
objects. Only a missing account raises, because the pipeline cannot
continue without a sequence number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable


# =========================================================================
# Status enums
# =========================================================================


class SendStatus(StrEnum):
    """Immediate status returned by sendTransaction."""

    PENDING = "PENDING"
    DUPLICATE = "DUPLICATE"
    TRY_AGAIN_LATER = "TRY_AGAIN_LATER"
    ERROR = "ERROR"


class TxStatus(StrEnum):
    """Ledger status returned by getTransaction."""

    NOT_FOUND = "NOT_FOUND"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# =========================================================================
# Result types
# =========================================================================


@dataclass(frozen=True)
class AccountState:
    """Source-account state needed to build a transaction.

    Attributes:
        account_id: G... strkey of the account.
        sequence: Current sequence number. The builder uses sequence + 1.
    """

    account_id: str
    sequence: int


@dataclass(frozen=True)
class SimulationResult:
    """Result of a simulateTransaction dry run.

    Attributes:
        error: Error payload reported by the simulation, verbatim.
            None when the simulation succeeded.
        transaction_data: Base64 SorobanTransactionData (footprint and
            resource fee). None on error or malformed response.
        min_resource_fee: Minimum resource fee in stroops.
        auth: Base64 SorobanAuthorizationEntry list for the invocation.
        retval: Base64 SCVal return value of the invocation, if any.
        latest_ledger: Ledger sequence the simulation ran against.
        raw: The raw result object for diagnostics.
    """

    error: str | None = None
    transaction_data: str | None = None
    min_resource_fee: int = 0
    auth: tuple[str, ...] = ()
    retval: str | None = None
    latest_ledger: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def has_result(self) -> bool:
        """Whether the simulation produced a usable invocation result."""
        return self.error is None and self.transaction_data is not None and self.retval is not None


@dataclass(frozen=True)
class SendResult:
    """Immediate result of sendTransaction.

    Attributes:
        hash: Transaction hash (64 hex chars).
        status: Immediate submission status.
        error_result_xdr: Base64 TransactionResult when status is ERROR.
        raw: The raw result object for diagnostics.
    """

    hash: str
    status: SendStatus
    error_result_xdr: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def rejected(self) -> bool:
        return self.status in (SendStatus.ERROR, SendStatus.TRY_AGAIN_LATER)


@dataclass(frozen=True)
class TxStatusResult:
    """Result of getTransaction.

    Attributes:
        status: NOT_FOUND, SUCCESS or FAILED.
        ledger: Ledger sequence that included the transaction, if any.
        result_xdr: Base64 TransactionResult, if any.
        result_meta_xdr: Base64 TransactionMeta, if any.
        detail: Raw ledger diagnostic payload, not reinterpreted.
    """

    status: TxStatus
    ledger: int | None = None
    result_xdr: str | None = None
    result_meta_xdr: str | None = None
    detail: dict[str, Any] = field(default_factory=dict, compare=False)


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class SorobanClient(Protocol):
    """Interface for Soroban RPC operations.

    Methods are async because network I/O is inherently asynchronous.
    """

    async def get_account(self, address: str) -> AccountState:
        """Fetch the account's current sequence number.

        Raises:
            AccountNotFound: If the ledger has no entry for the address.
        """
        ...

    async def simulate(self, tx_xdr: str) -> SimulationResult:
        """Dry-run a transaction envelope against current ledger state."""
        ...

    async def submit(self, signed_tx_xdr: str) -> SendResult:
        """Submit a signed transaction envelope."""
        ...

    async def get_transaction(self, tx_hash: str) -> TxStatusResult:
        """Query the status of a previously submitted transaction."""
        ...
