"""
Signing delegate protocol — the secrets boundary.

The pipeline never sees private keys. It hands a prepared envelope (base64
XDR) to an external, user-controlled signing authority, typically a wallet
extension, and receives back a signed envelope or an error.

The delegate is a capability with no guaranteed presence:
    - it may be absent (not installed) → ``None`` / UnavailableDelegate
    - it may refuse (user declines)    → SigningRefused
    - it may return an error           → SigningError / NotAuthorized

Three calls, each returning a result object carrying either the success
payload or ``error``:
    - is_allowed()        — has this session been authorised?
    - request_access()    — request access and return the active address
    - sign_transaction()  — sign an envelope for a network and address

Every operation queries the delegate with request_address() before signing
and never caches the address: the user may switch accounts in the wallet
between calls without notification.

Concrete implementations (delegates.py):
    - KeypairDelegate (local secret key; development and scripted use)
    - HttpWalletDelegate (HTTP bridge to a wallet extension)
    - UnavailableDelegate (this module; stands in for "not installed")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from stellar_sdk import TransactionEnvelope

from escrow_control.errors import NotAuthorized, SigningError, SigningRefused
from escrow_control.soroban.estimator import PreparedTransaction

logger = logging.getLogger(__name__)

NOT_INSTALLED_ERROR = "Signing delegate is not installed"


# =========================================================================
# Result types
# =========================================================================


@dataclass(frozen=True)
class AllowedResult:
    """Result of is_allowed()."""

    allowed: bool = False
    error: str | None = None


@dataclass(frozen=True)
class AccessResult:
    """Result of request_access().

    Attributes:
        address: Active account strkey when access was granted.
        error: Error message when access was not granted.
    """

    address: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class SignResult:
    """Result of sign_transaction().

    Attributes:
        signed_tx_xdr: Base64 signed envelope on success.
        signer_address: Address that produced the signature, if reported.
        error: Error message on failure.
        declined: True when the failure is the user declining to sign.
    """

    signed_tx_xdr: str | None = None
    signer_address: str | None = None
    error: str | None = None
    declined: bool = False


@dataclass(frozen=True)
class SignedTransaction:
    """A prepared envelope carrying a signature. Submitted exactly once.

    Attributes:
        envelope_xdr: Base64 signed TransactionEnvelope.
        tx_hash: Hex hash of the transaction (network-bound).
        signer_address: The address the envelope was signed for.
    """

    envelope_xdr: str
    tx_hash: str
    signer_address: str


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class SigningDelegate(Protocol):
    """Interface to an external signing authority."""

    async def is_allowed(self) -> AllowedResult:
        """Whether this session has already been granted access."""
        ...

    async def request_access(self) -> AccessResult:
        """Request access and return the currently active address."""
        ...

    async def sign_transaction(
        self,
        tx_xdr: str,
        *,
        network_passphrase: str,
        address: str,
    ) -> SignResult:
        """Sign a base64 envelope for the given network and expected signer."""
        ...


class UnavailableDelegate:
    """Stand-in for an absent signing authority. Every call reports an error."""

    async def is_allowed(self) -> AllowedResult:
        return AllowedResult(allowed=False, error=NOT_INSTALLED_ERROR)

    async def request_access(self) -> AccessResult:
        return AccessResult(error=NOT_INSTALLED_ERROR)

    async def sign_transaction(
        self,
        tx_xdr: str,
        *,
        network_passphrase: str,
        address: str,
    ) -> SignResult:
        return SignResult(error=NOT_INSTALLED_ERROR)


def resolve_delegate(delegate: SigningDelegate | None) -> SigningDelegate:
    """Return the delegate, or UnavailableDelegate when none is installed."""
    return delegate if delegate is not None else UnavailableDelegate()


# =========================================================================
# Presence checks (never raise)
# =========================================================================


async def is_delegate_installed(delegate: SigningDelegate | None) -> bool:
    """Whether the delegate is present and answers is_allowed without error."""
    if delegate is None:
        return False
    try:
        result = await delegate.is_allowed()
    except Exception:
        logger.debug("signing delegate presence check raised", exc_info=True)
        return False
    return result.error is None


async def check_delegate_connection(delegate: SigningDelegate | None) -> bool:
    """Whether the delegate reports this session as allowed."""
    if delegate is None:
        return False
    try:
        result = await delegate.is_allowed()
    except Exception:
        logger.warning("signing delegate connection check failed", exc_info=True)
        return False
    return result.allowed


# =========================================================================
# Pipeline steps
# =========================================================================


async def request_address(delegate: SigningDelegate | None) -> str:
    """Ask the delegate for access and return the active address.

    Called on every operation; the result is never cached.

    Raises:
        NotAuthorized: If the delegate is absent, refuses access, or
            returns no address.
    """
    active = resolve_delegate(delegate)
    result = await active.request_access()
    if result.error:
        raise NotAuthorized(result.error, details={"stage": "request_access"})
    if not result.address:
        raise NotAuthorized(
            "Signing delegate returned no address",
            details={"stage": "request_access"},
        )
    return result.address


async def sign_prepared(
    delegate: SigningDelegate | None,
    prepared: PreparedTransaction,
    network_passphrase: str,
    address: str,
) -> SignedTransaction:
    """Have the delegate sign a prepared transaction.

    Args:
        delegate: The signing authority (None → unavailable).
        prepared: Envelope assembled by the estimator.
        network_passphrase: Network the signature is bound to.
        address: Expected signer, as returned by request_address().

    Returns:
        SignedTransaction with the signed envelope and its hash.

    Raises:
        SigningRefused: If the user declined.
        SigningError: On any other delegate error, an unparseable result,
            or a signed envelope whose hash differs from the prepared one.
    """
    active = resolve_delegate(delegate)
    result = await active.sign_transaction(
        prepared.envelope_xdr,
        network_passphrase=network_passphrase,
        address=address,
    )
    if result.error:
        if result.declined:
            raise SigningRefused(
                f"Signature failed: {result.error}",
                details={"address": address},
            )
        raise SigningError(
            f"Signature failed: {result.error}",
            details={"address": address},
        )
    if not result.signed_tx_xdr:
        raise SigningError("Signature failed: no signed transaction returned")

    try:
        envelope = TransactionEnvelope.from_xdr(result.signed_tx_xdr, network_passphrase)
    except Exception as exc:
        raise SigningError(f"Signature failed: unparseable signed transaction: {exc}") from exc
    if not envelope.signatures:
        raise SigningError("Signature failed: signed transaction carries no signature")

    tx_hash = envelope.hash_hex()
    expected_hash = TransactionEnvelope.from_xdr(
        prepared.envelope_xdr, network_passphrase
    ).hash_hex()
    if tx_hash != expected_hash:
        raise SigningError(
            "Signature failed: delegate signed a different transaction",
            details={"address": address, "expected": expected_hash, "signed": tx_hash},
        )

    return SignedTransaction(
        envelope_xdr=result.signed_tx_xdr,
        tx_hash=tx_hash,
        signer_address=result.signer_address or address,
    )
