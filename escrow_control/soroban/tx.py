"""
Soroban transaction builder for escrow contract calls.

Builds an unsigned transaction envelope around exactly one contract
invocation. This is the "transaction recipe": pure, no secrets, no
network calls. The account state is fetched by the caller beforehand.

The builder enforces:
    - Exactly one operation per envelope
    - The operation is an InvokeHostFunction (contract call)
    - fee > 0 and timeout_seconds > 0
    - Validity window [0, now + timeout_seconds], anchored to build time

The source sequence number is account.sequence + 1. The caller's
AccountState is never mutated; a fresh stellar_sdk Account is created
for every build.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from stellar_sdk import Account, TransactionBuilder, TransactionEnvelope
from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.operation import InvokeHostFunction

from escrow_control.soroban.client import AccountState

# Base inclusion fee in stroops (the network minimum).
BASE_FEE = 100

# Seconds a built transaction stays valid.
DEFAULT_TIMEOUT_SECONDS = 180


@dataclass(frozen=True)
class ContractCall:
    """A single named call into a contract with encoded arguments."""

    contract_id: str
    function_name: str
    args: tuple[stellar_xdr.SCVal, ...]


@dataclass(frozen=True)
class UnsignedTransaction:
    """An unsigned, unsimulated transaction envelope.

    Attributes:
        envelope_xdr: Base64 TransactionEnvelope.
        network_passphrase: Passphrase the envelope is bound to.
        source: Source account strkey.
        sequence: Sequence number used by the envelope.
        fee: Fee ceiling (inclusion fee) in stroops.
        max_time: Upper bound of the validity window (unix seconds).
    """

    envelope_xdr: str
    network_passphrase: str
    source: str
    sequence: int
    fee: int
    max_time: int

    def envelope(self) -> TransactionEnvelope:
        """A fresh, mutable TransactionEnvelope parsed from the XDR."""
        return TransactionEnvelope.from_xdr(self.envelope_xdr, self.network_passphrase)


def invoke_contract(
    contract_id: str,
    function_name: str,
    args: Sequence[stellar_xdr.SCVal] = (),
) -> ContractCall:
    """Describe a contract invocation.

    Raises:
        ValueError: If contract_id or function_name is empty.
    """
    if not contract_id:
        raise ValueError("contract_id must be non-empty")
    if not function_name:
        raise ValueError("function_name must be non-empty")
    return ContractCall(
        contract_id=contract_id,
        function_name=function_name,
        args=tuple(args),
    )


def build_transaction(
    account: AccountState,
    call: ContractCall,
    network_passphrase: str,
    *,
    fee: int = BASE_FEE,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    now: Callable[[], float] = time.time,
) -> UnsignedTransaction:
    """Build an unsigned envelope for a single contract call.

    Args:
        account: Source account state (sequence is read, not mutated).
        call: The contract invocation.
        network_passphrase: Target network passphrase.
        fee: Fee ceiling in stroops, before resource fees.
        timeout_seconds: Validity window length from now().
        now: Clock returning unix seconds. Inject for tests.

    Returns:
        UnsignedTransaction.

    Raises:
        ValueError: If fee or timeout_seconds is not positive.
    """
    if fee <= 0:
        raise ValueError(f"fee must be positive, got: {fee}")
    if timeout_seconds <= 0:
        raise ValueError(f"timeout_seconds must be positive, got: {timeout_seconds}")

    max_time = int(now()) + timeout_seconds
    source = Account(account.account_id, account.sequence)
    envelope = (
        TransactionBuilder(source, network_passphrase, base_fee=fee)
        .add_time_bounds(0, max_time)
        .append_invoke_contract_function_op(
            contract_id=call.contract_id,
            function_name=call.function_name,
            parameters=list(call.args),
        )
        .build()
    )

    operations = envelope.transaction.operations
    if len(operations) != 1 or not isinstance(operations[0], InvokeHostFunction):
        raise ValueError("envelope must contain exactly one contract invocation")

    return UnsignedTransaction(
        envelope_xdr=envelope.to_xdr(),
        network_passphrase=network_passphrase,
        source=account.account_id,
        sequence=envelope.transaction.sequence,
        fee=envelope.transaction.fee,
        max_time=max_time,
    )
