"""
Soroban transaction pipeline for escrow-control.

Public API:

    Pure layer (no I/O):
        - Codec: ``encode()``, ``decode()``, ``ValueType``, ``ESCROW_RECORD``.
        - Transaction builder: ``invoke_contract()``, ``build_transaction()``.
        - Assembly: ``assemble()`` (unsigned + simulation → prepared).

    Impure layer (network I/O):
        - ``estimate()`` — simulate and assemble, returns PreparedTransaction.
        - ``request_address()`` / ``sign_prepared()`` — signing delegate steps.
        - ``ConfirmationTracker`` — submit once, poll to a terminal outcome.

    Protocols (for dependency injection):
        - ``SorobanClient`` — network boundary.
        - ``SigningDelegate`` — secrets boundary.
        - ``JsonRpcTransport`` — HTTP boundary under the JSON-RPC client.

    Concrete implementations:
        - ``JsonRpcClient`` over ``HttpxTransport``.
        - ``KeypairDelegate``, ``HttpWalletDelegate``, ``UnavailableDelegate``.
"""

from escrow_control.soroban.client import (
    AccountState,
    SendResult,
    SendStatus,
    SimulationResult,
    SorobanClient,
    TxStatus,
    TxStatusResult,
)
from escrow_control.soroban.codec import (
    ESCROW_RECORD,
    I128_MAX,
    I128_MIN,
    ValueType,
    decode,
    encode,
    from_wire,
    to_wire,
)
from escrow_control.soroban.delegates import HttpWalletDelegate, KeypairDelegate
from escrow_control.soroban.estimator import PreparedTransaction, assemble, estimate
from escrow_control.soroban.jsonrpc_client import JsonRpcClient
from escrow_control.soroban.signer import (
    AccessResult,
    AllowedResult,
    SignedTransaction,
    SigningDelegate,
    SignResult,
    UnavailableDelegate,
    check_delegate_connection,
    is_delegate_installed,
    request_address,
    sign_prepared,
)
from escrow_control.soroban.tracker import (
    ConfirmationTracker,
    TrackerState,
    TransactionOutcome,
)
from escrow_control.soroban.transport import HttpxTransport, JsonRpcTransport
from escrow_control.soroban.tx import (
    BASE_FEE,
    ContractCall,
    UnsignedTransaction,
    build_transaction,
    invoke_contract,
)

__all__ = [
    "BASE_FEE",
    "ESCROW_RECORD",
    "I128_MAX",
    "I128_MIN",
    "AccessResult",
    "AccountState",
    "AllowedResult",
    "ConfirmationTracker",
    "ContractCall",
    "HttpWalletDelegate",
    "HttpxTransport",
    "JsonRpcClient",
    "JsonRpcTransport",
    "KeypairDelegate",
    "PreparedTransaction",
    "SendResult",
    "SendStatus",
    "SignResult",
    "SignedTransaction",
    "SigningDelegate",
    "SimulationResult",
    "SorobanClient",
    "TrackerState",
    "TransactionOutcome",
    "TxStatus",
    "TxStatusResult",
    "UnavailableDelegate",
    "UnsignedTransaction",
    "ValueType",
    "assemble",
    "build_transaction",
    "check_delegate_connection",
    "decode",
    "encode",
    "estimate",
    "from_wire",
    "invoke_contract",
    "is_delegate_installed",
    "request_address",
    "sign_prepared",
    "to_wire",
]
