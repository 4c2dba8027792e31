"""
Fee/resource estimator.

Runs a non-mutating simulateTransaction dry run for an unsigned envelope
and assembles the ledger's recommended resource plan into a
PreparedTransaction.

Policy:
    - The simulation reports an error → SimulationError(detail) with the
      error payload verbatim. No fallback fee is ever guessed.
    - The simulation returns no usable result → SimulationError("no result").
    - Otherwise the ledger's soroban data, resource fee and auth entries
      are taken as-is. The estimator does not second-guess them.

Assembly (pure):
    fee          = fee ceiling + minResourceFee
    soroban_data = SorobanTransactionData from the simulation
    auth         = simulation auth entries, unless the operation already
                   carries its own
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.operation import InvokeHostFunction

from escrow_control.errors import SimulationError
from escrow_control.soroban.client import SimulationResult, SorobanClient
from escrow_control.soroban.tx import UnsignedTransaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedTransaction:
    """An envelope assembled with its simulated resource plan.

    Attributes:
        envelope_xdr: Base64 TransactionEnvelope, unsigned.
        network_passphrase: Passphrase the envelope is bound to.
        source: Source account strkey.
        fee: Total fee in stroops (ceiling + resource fee).
        min_resource_fee: Resource fee recommended by the simulation.
        simulation: The simulation this plan came from.
    """

    envelope_xdr: str
    network_passphrase: str
    source: str
    fee: int
    min_resource_fee: int
    simulation: SimulationResult


def assemble(unsigned: UnsignedTransaction, simulation: SimulationResult) -> PreparedTransaction:
    """Apply a successful simulation to an unsigned envelope.

    The unsigned transaction is not modified; a new envelope is parsed
    from its XDR.

    Raises:
        SimulationError: If the simulation carries an error or no result.
    """
    if simulation.error is not None:
        raise SimulationError(simulation.error, details={"simulation": simulation.raw})
    if not simulation.has_result:
        raise SimulationError("no result", details={"simulation": simulation.raw})

    envelope = unsigned.envelope()
    transaction = envelope.transaction
    transaction.soroban_data = stellar_xdr.SorobanTransactionData.from_xdr(
        simulation.transaction_data
    )
    transaction.fee = unsigned.fee + simulation.min_resource_fee

    operation = transaction.operations[0]
    if isinstance(operation, InvokeHostFunction) and not operation.auth:
        operation.auth = [
            stellar_xdr.SorobanAuthorizationEntry.from_xdr(entry)
            for entry in simulation.auth
        ]

    return PreparedTransaction(
        envelope_xdr=envelope.to_xdr(),
        network_passphrase=unsigned.network_passphrase,
        source=unsigned.source,
        fee=transaction.fee,
        min_resource_fee=simulation.min_resource_fee,
        simulation=simulation,
    )


async def simulate(client: SorobanClient, unsigned: UnsignedTransaction) -> SimulationResult:
    """Run the dry run and return the raw SimulationResult."""
    return await client.simulate(unsigned.envelope_xdr)


async def estimate(client: SorobanClient, unsigned: UnsignedTransaction) -> PreparedTransaction:
    """Dry-run an unsigned envelope and assemble the prepared transaction.

    Args:
        client: Soroban client used for simulateTransaction.
        unsigned: Envelope from build_transaction().

    Returns:
        PreparedTransaction carrying the ledger's resource plan and fee.

    Raises:
        SimulationError: On a simulation error payload or no result.
    """
    simulation = await simulate(client, unsigned)
    if simulation.error is not None:
        logger.warning("simulation rejected transaction: %s", simulation.error)
    elif not simulation.has_result:
        logger.warning("simulation returned no usable result")
    prepared = assemble(unsigned, simulation)
    logger.debug(
        "prepared transaction fee=%d (resource fee %d)",
        prepared.fee,
        prepared.min_resource_fee,
    )
    return prepared
