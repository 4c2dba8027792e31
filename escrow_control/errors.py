"""
Escrow error taxonomy and classification.

Two layers:

    Exceptions (raised by the pipeline):
        ``EscrowError`` and its subclasses. Each carries a human message,
        a machine-readable ``error_code`` and a ``details`` dict.

    Classification (pure, no I/O):
        ``classify_error()`` maps an arbitrary raised error to one of the
        closed set of ``EscrowErrorKind`` values by case-insensitive
        substring matching on its text. This is the only place that reads
        free-text diagnostics; callers never match on messages themselves.

Contract revert identifiers:
    The escrow contract reverts with numbered errors
    (NotFound = 1, AlreadyExists = 2, AlreadyCompleted = 3, NotSender = 4).
    Ledger diagnostics render them either by name or as
    ``Error(Contract, #N)``. Both spellings are recognised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


# =========================================================================
# Kinds
# =========================================================================


class EscrowErrorKind(StrEnum):
    """Closed set of domain error kinds surfaced to callers."""

    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    NOT_SENDER = "NOT_SENDER"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    UNKNOWN = "UNKNOWN"


# User-facing text per kind.
KIND_MESSAGES: dict[EscrowErrorKind, str] = {
    EscrowErrorKind.NOT_FOUND: "Escrow not found",
    EscrowErrorKind.ALREADY_EXISTS: "An escrow with this ID already exists",
    EscrowErrorKind.ALREADY_COMPLETED: "Escrow already completed",
    EscrowErrorKind.NOT_SENDER: "Only the sender can perform this action",
    EscrowErrorKind.CONFIGURATION_MISSING: (
        "Contract ID not configured. Please check your environment configuration."
    ),
    EscrowErrorKind.UNKNOWN: "An unknown error occurred",
}

CONFIGURATION_MISSING_MESSAGE = "Contract ID not configured"


# =========================================================================
# Exceptions
# =========================================================================


class EscrowError(Exception):
    """Base class for every failure raised by the escrow pipeline.

    Args:
        message: Human-readable description.
        error_code: Machine-readable category (e.g. "SIMULATION_FAILED").
        details: Structured diagnostics. Never contains secrets.
    """

    default_code = "ESCROW_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}


class ConfigurationMissing(EscrowError):
    """The escrow contract id is not configured."""

    default_code = "CONFIGURATION_MISSING"

    def __init__(self, message: str = CONFIGURATION_MISSING_MESSAGE) -> None:
        super().__init__(message)


class NotAuthorized(EscrowError):
    """The signing delegate is absent or did not grant access."""

    default_code = "NOT_AUTHORIZED"


class SigningRefused(EscrowError):
    """The user declined to sign the transaction."""

    default_code = "SIGNING_REFUSED"


class SigningError(EscrowError):
    """The signing delegate returned an error other than a refusal."""

    default_code = "SIGNING_ERROR"


class AccountNotFound(EscrowError):
    """The source account does not exist on the ledger."""

    default_code = "ACCOUNT_NOT_FOUND"


class EncodingError(EscrowError, ValueError):
    """A native value does not match its declared ledger type."""

    default_code = "ENCODING_ERROR"


class SimulationError(EscrowError):
    """The dry run rejected the transaction or returned no usable result."""

    default_code = "SIMULATION_FAILED"

    def __init__(self, detail: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Simulation failed: {detail}", details=details)
        self.detail = detail


class SubmissionError(EscrowError):
    """The ledger rejected the signed envelope outright."""

    default_code = "SUBMISSION_REJECTED"


class TransactionFailed(EscrowError):
    """The transaction was included in a ledger but failed."""

    default_code = "TRANSACTION_FAILED"


class ConfirmationTimeout(EscrowError):
    """Confirmation was not observed within the polling budget.

    The outcome is ambiguous: the transaction may still land later.
    Callers should re-query escrow state rather than resubmit.
    """

    default_code = "TIMEOUT"


class LedgerRpcError(EscrowError):
    """The RPC endpoint answered with a JSON-RPC error object."""

    default_code = "RPC_ERROR"


# =========================================================================
# Classification
# =========================================================================

# Lower-cased revert identifiers. Checked in this order; the contract never
# emits more than one in a single diagnostic.
_NAME_PATTERNS: tuple[tuple[str, EscrowErrorKind], ...] = (
    ("notfound", EscrowErrorKind.NOT_FOUND),
    ("alreadyexists", EscrowErrorKind.ALREADY_EXISTS),
    ("alreadycompleted", EscrowErrorKind.ALREADY_COMPLETED),
    ("notsender", EscrowErrorKind.NOT_SENDER),
    (CONFIGURATION_MISSING_MESSAGE.lower(), EscrowErrorKind.CONFIGURATION_MISSING),
)

_CONTRACT_CODES: dict[int, EscrowErrorKind] = {
    1: EscrowErrorKind.NOT_FOUND,
    2: EscrowErrorKind.ALREADY_EXISTS,
    3: EscrowErrorKind.ALREADY_COMPLETED,
    4: EscrowErrorKind.NOT_SENDER,
}

_CONTRACT_CODE_RE = re.compile(r"error\(contract,\s*#(\d+)\)")


@dataclass(frozen=True)
class ClassifiedError:
    """Result of classify_error().

    Attributes:
        kind: The domain error kind.
        message: User-facing text. For UNKNOWN this is the raw error
            message when one exists.
    """

    kind: EscrowErrorKind
    message: str


def _error_texts(error: object) -> tuple[str, str]:
    text = str(error)
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = text
    return text, message


def classify_error(error: object) -> ClassifiedError:
    """Map an arbitrary error to a ClassifiedError.

    Matching is case-insensitive and considers both ``str(error)`` and the
    error's ``message`` attribute, as well as the ``details`` payload of
    EscrowError instances (ledger diagnostics live there).

    Args:
        error: Any exception or object with a textual representation.

    Returns:
        ClassifiedError. Unmatched errors map to UNKNOWN carrying the raw
        message, or the generic unknown text when the message is empty.
    """
    text, message = _error_texts(error)
    haystacks = [text.lower(), message.lower()]
    details = getattr(error, "details", None)
    if details:
        haystacks.append(str(details).lower())

    for haystack in haystacks:
        for needle, kind in _NAME_PATTERNS:
            if needle in haystack:
                return ClassifiedError(kind=kind, message=KIND_MESSAGES[kind])

    for haystack in haystacks:
        match = _CONTRACT_CODE_RE.search(haystack)
        if match is not None:
            kind = _CONTRACT_CODES.get(int(match.group(1)))
            if kind is not None:
                return ClassifiedError(kind=kind, message=KIND_MESSAGES[kind])

    fallback = message or KIND_MESSAGES[EscrowErrorKind.UNKNOWN]
    return ClassifiedError(kind=EscrowErrorKind.UNKNOWN, message=fallback)


def describe_error(error: object) -> str:
    """User-facing sentence for an error (see classify_error)."""
    return classify_error(error).message
