"""
Escrow operation façade.

Composes the Soroban pipeline into the four public intents:

    - ``create(id, receiver, amount)`` — mutating
    - ``query(id)``                    — read-only, best-effort
    - ``release(id)``                  — mutating
    - ``refund(id)``                   — mutating

Mutating flow (one contract call per transaction):

    config check → request_address → get_account → build → estimate
        → sign → submit_and_confirm

    The contract id is checked before anything else, so an unconfigured
    deployment fails with ConfigurationMissing without any RPC call or
    delegate prompt. The signer address is re-derived on every call.

Read-only flow:

    ``query`` builds a ``get`` call against a freshly generated throwaway
    keypair (sequence 0, no account lookup, never signed, never submitted)
    and only simulates it. Every failure mode, including a missing contract
    id, yields ``None``: absence and corruption are not distinguished.

Business rules (uniqueness, sender-only release/refund, refund
preconditions) are enforced by the contract; the façade relays its
verdict. Use ``errors.classify_error`` to turn a raised error into a
domain error kind.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stellar_sdk import Keypair

from escrow_control.context import LedgerContext
from escrow_control.errors import (
    ConfirmationTimeout,
    EncodingError,
    TransactionFailed,
)
from escrow_control.explorer import explorer_link
from escrow_control.soroban.client import AccountState
from escrow_control.soroban.codec import (
    ValueType,
    decode,
    encode,
    from_wire,
    to_i128_int,
)
from escrow_control.soroban.estimator import estimate, simulate
from escrow_control.soroban.signer import SigningDelegate, request_address, sign_prepared
from escrow_control.soroban.tracker import ConfirmationTracker, Sleep, TrackerState
from escrow_control.soroban.tx import (
    BASE_FEE,
    DEFAULT_TIMEOUT_SECONDS,
    build_transaction,
    invoke_contract,
)

logger = logging.getLogger(__name__)

# Contract function names.
FN_CREATE = "create"
FN_GET = "get"
FN_RELEASE = "release"
FN_REFUND = "refund"


@dataclass(frozen=True)
class Escrow:
    """Read-only projection of an on-chain escrow record.

    Attributes:
        id: Caller-assigned unique id (a contract symbol).
        sender: Sender address.
        receiver: Receiver address.
        amount: Signed 128-bit amount as a decimal string.
        completed: True once released or refunded.
    """

    id: str
    sender: str
    receiver: str
    amount: str
    completed: bool

    @classmethod
    def from_native(cls, data: Any) -> Escrow:
        """Build from a decoded contract struct.

        Raises:
            ValueError: If the data is not a well-formed escrow record.
        """
        if not isinstance(data, dict):
            raise ValueError(f"escrow record must be a mapping, got: {type(data).__name__}")
        amount = data["amount"]
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"escrow amount must be an integer, got: {amount!r}")
        completed = data["completed"]
        if not isinstance(completed, bool):
            raise ValueError(f"escrow completed flag must be a bool, got: {completed!r}")
        return cls(
            id=str(data["id"]),
            sender=str(data["sender"]),
            receiver=str(data["receiver"]),
            amount=str(amount),
            completed=completed,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "sender": self.sender,
            "receiver": self.receiver,
            "amount": self.amount,
            "completed": self.completed,
        }


class EscrowService:
    """The four escrow intents over a ledger context and signing delegate.

    Args:
        context: Ledger context (configuration + client).
        delegate: External signing authority. None means not installed.
        tracker: Confirmation tracker. Defaults to one over context.client.
        sleep: Sleep primitive for the default tracker.
        now: Clock for transaction validity windows.
        keypair_factory: Source of throwaway identities for queries.
    """

    def __init__(
        self,
        context: LedgerContext,
        delegate: SigningDelegate | None = None,
        *,
        tracker: ConfirmationTracker | None = None,
        sleep: Sleep | None = None,
        now: Callable[[], float] = time.time,
        keypair_factory: Callable[[], Keypair] = Keypair.random,
    ) -> None:
        self._context = context
        self._delegate = delegate
        self._tracker = tracker or ConfirmationTracker(context.client, sleep=sleep)
        self._now = now
        self._keypair_factory = keypair_factory

    @property
    def context(self) -> LedgerContext:
        return self._context

    # -----------------------------------------------------------------
    # Mutating intents
    # -----------------------------------------------------------------

    async def create(self, escrow_id: str, receiver: str, amount: int | str) -> str:
        """Create an escrow from the delegate's active address to receiver.

        Returns:
            The confirmed transaction hash.

        Raises:
            ConfigurationMissing: Contract id unset (before any I/O).
            EncodingError: Invalid id, receiver, or negative/non-integer amount.
            NotAuthorized, SigningRefused, SigningError: Delegate failures.
            SimulationError: The contract rejected the call (e.g. AlreadyExists).
            SubmissionError, TransactionFailed, ConfirmationTimeout.
        """
        contract_id = self._context.config.require_contract_id()
        value = to_i128_int(amount)
        if value < 0:
            raise EncodingError(f"amount must be non-negative, got: {value}")
        id_arg = encode(escrow_id, ValueType.SYMBOL)
        receiver_arg = encode(receiver, ValueType.ADDRESS)
        amount_arg = encode(value, ValueType.I128)

        address = await request_address(self._delegate)
        args = [id_arg, encode(address, ValueType.ADDRESS), receiver_arg, amount_arg]
        return await self._invoke(contract_id, address, FN_CREATE, args)

    async def release(self, escrow_id: str) -> str:
        """Release an escrow to its receiver. Only the sender may succeed."""
        return await self._sender_action(FN_RELEASE, escrow_id)

    async def refund(self, escrow_id: str) -> str:
        """Refund an escrow to its sender. Only the sender may succeed."""
        return await self._sender_action(FN_REFUND, escrow_id)

    async def _sender_action(self, function_name: str, escrow_id: str) -> str:
        contract_id = self._context.config.require_contract_id()
        id_arg = encode(escrow_id, ValueType.SYMBOL)
        address = await request_address(self._delegate)
        args = [id_arg, encode(address, ValueType.ADDRESS)]
        return await self._invoke(contract_id, address, function_name, args)

    async def _invoke(
        self,
        contract_id: str,
        address: str,
        function_name: str,
        args: list[Any],
    ) -> str:
        config = self._context.config
        client = self._context.client

        account = await client.get_account(address)
        unsigned = build_transaction(
            account,
            invoke_contract(contract_id, function_name, args),
            config.network_passphrase,
            fee=BASE_FEE,
            timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
            now=self._now,
        )
        prepared = await estimate(client, unsigned)
        signed = await sign_prepared(
            self._delegate, prepared, config.network_passphrase, address
        )
        outcome = await self._tracker.submit_and_confirm(signed)

        if outcome.state == TrackerState.SUCCESS:
            return outcome.tx_hash
        if outcome.state == TrackerState.FAILED:
            raise TransactionFailed(
                f"Transaction failed: {json.dumps(outcome.detail, sort_keys=True, default=str)}",
                details={"hash": outcome.tx_hash, "response": outcome.detail},
            )
        raise ConfirmationTimeout(
            "Transaction timeout",
            details={"hash": outcome.tx_hash, "attempts": outcome.attempts},
        )

    # -----------------------------------------------------------------
    # Read-only intent
    # -----------------------------------------------------------------

    async def query(self, escrow_id: str) -> Escrow | None:
        """Fetch an escrow by id. Returns None on absence or any failure."""
        try:
            contract_id = self._context.config.require_contract_id()
            throwaway = self._keypair_factory()
            unsigned = build_transaction(
                AccountState(account_id=throwaway.public_key, sequence=0),
                invoke_contract(contract_id, FN_GET, [encode(escrow_id, ValueType.SYMBOL)]),
                self._context.config.network_passphrase,
                fee=BASE_FEE,
                timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
                now=self._now,
            )
            simulation = await simulate(self._context.client, unsigned)
            if simulation.error is not None or simulation.retval is None:
                return None
            data = decode(from_wire(simulation.retval))
            if data is None:
                return None
            return Escrow.from_native(data)
        except Exception as exc:
            logger.warning("escrow query for %r failed: %s", escrow_id, exc)
            return None

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    async def active_address(self) -> str:
        """The delegate's currently active address (never cached)."""
        return await request_address(self._delegate)

    def explorer_link(self, tx_hash: str) -> str:
        return explorer_link(tx_hash, self._context.config.explorer_network)
