"""
escrow-control: orchestration layer for two-party escrows on Soroban.

Every escrow operation is:
- encoded as a single contract call
- simulated for fees and resources
- signed by an external signing authority
- submitted once and tracked to a terminal outcome

Reads are best-effort simulations that never raise.
"""

__version__ = "0.1.0"

from escrow_control.balance import HorizonBalanceReader
from escrow_control.config import EscrowConfig
from escrow_control.context import (
    LedgerContext,
    close_default_context,
    get_default_context,
)
from escrow_control.errors import (
    AccountNotFound,
    ClassifiedError,
    ConfigurationMissing,
    ConfirmationTimeout,
    EncodingError,
    EscrowError,
    EscrowErrorKind,
    LedgerRpcError,
    NotAuthorized,
    SigningError,
    SigningRefused,
    SimulationError,
    SubmissionError,
    TransactionFailed,
    classify_error,
    describe_error,
)
from escrow_control.escrow import Escrow, EscrowService
from escrow_control.explorer import explorer_link

__all__ = [
    "AccountNotFound",
    "ClassifiedError",
    "ConfigurationMissing",
    "ConfirmationTimeout",
    "EncodingError",
    "Escrow",
    "EscrowConfig",
    "EscrowError",
    "EscrowErrorKind",
    "EscrowService",
    "HorizonBalanceReader",
    "LedgerContext",
    "LedgerRpcError",
    "NotAuthorized",
    "SigningError",
    "SigningRefused",
    "SimulationError",
    "SubmissionError",
    "TransactionFailed",
    "classify_error",
    "close_default_context",
    "describe_error",
    "explorer_link",
    "get_default_context",
]
