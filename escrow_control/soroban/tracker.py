"""
Submission and confirmation tracker.

Submits a signed envelope exactly once, then polls getTransaction until
the ledger reports a terminal status or the attempt budget runs out.

State machine:

    SUBMITTED → PENDING* → SUCCESS | FAILED
    SUBMITTED → PENDING × max_attempts → TIMEOUT

    - An immediate ERROR / TRY_AGAIN_LATER from sendTransaction raises
      SubmissionError. Submission is never retried: a rejected envelope
      may need a fee bump or may already be partially applied.
    - Status is checked at most ``max_attempts`` times, ``poll_interval``
      seconds apart. The first SUCCESS or FAILED ends the loop.
    - Nothing follows a terminal state. The tracker does not retry past
      TIMEOUT; a timed-out transaction may still land later.

The sleep primitive is injectable so tests can drive the loop without
real delay. The loop awaits it between attempts and never catches
``asyncio.CancelledError``: cancelling the task running
``submit_and_confirm`` stops polling.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from escrow_control.errors import SubmissionError
from escrow_control.soroban.client import SorobanClient, TxStatus
from escrow_control.soroban.signer import SignedTransaction

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_ATTEMPTS = 30

Sleep = Callable[[float], Awaitable[Any]]


class TrackerState(StrEnum):
    """States of the confirmation state machine."""

    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"


TERMINAL_STATES = frozenset({TrackerState.SUCCESS, TrackerState.FAILED, TrackerState.TIMEOUT})


@dataclass(frozen=True)
class TransactionOutcome:
    """Terminal outcome of a submitted transaction.

    Attributes:
        state: SUCCESS, FAILED or TIMEOUT.
        tx_hash: Hash of the submitted transaction.
        attempts: Number of status checks performed.
        detail: Raw ledger diagnostic payload of the last status check
            (not reinterpreted). Empty for TIMEOUT with no payload.
    """

    state: TrackerState
    tx_hash: str
    attempts: int
    detail: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.state not in TERMINAL_STATES:
            raise ValueError(f"outcome state must be terminal, got: {self.state}")

    @property
    def succeeded(self) -> bool:
        return self.state == TrackerState.SUCCESS


class ConfirmationTracker:
    """Submit-once, poll-until-terminal tracker.

    Args:
        client: Soroban client for sendTransaction / getTransaction.
        poll_interval: Seconds between status checks.
        max_attempts: Maximum number of status checks.
        sleep: Awaitable sleep primitive. Defaults to asyncio.sleep.
    """

    def __init__(
        self,
        client: SorobanClient,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Sleep | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got: {max_attempts}")
        if poll_interval < 0:
            raise ValueError(f"poll_interval must be >= 0, got: {poll_interval}")
        self._client = client
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._sleep = sleep or asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def submit(self, signed: SignedTransaction) -> str:
        """Submit once and return the transaction hash.

        Raises:
            SubmissionError: If the ledger rejects the envelope outright.
        """
        result = await self._client.submit(signed.envelope_xdr)
        if result.rejected:
            raise SubmissionError(
                f"Transaction failed: submission status {result.status}",
                details={
                    "hash": result.hash,
                    "status": str(result.status),
                    "errorResultXdr": result.error_result_xdr,
                    "response": result.raw,
                },
            )
        tx_hash = result.hash or signed.tx_hash
        logger.info("submitted transaction %s (status %s)", tx_hash, result.status)
        return tx_hash

    async def confirm(self, tx_hash: str) -> TransactionOutcome:
        """Poll status until terminal or the attempt budget is exhausted."""
        detail: dict[str, Any] = {}
        for attempt in range(1, self._max_attempts + 1):
            status = await self._client.get_transaction(tx_hash)
            detail = status.detail
            if status.status == TxStatus.SUCCESS:
                logger.info("transaction %s confirmed after %d checks", tx_hash, attempt)
                return TransactionOutcome(TrackerState.SUCCESS, tx_hash, attempt, detail)
            if status.status == TxStatus.FAILED:
                logger.warning("transaction %s failed on ledger", tx_hash)
                return TransactionOutcome(TrackerState.FAILED, tx_hash, attempt, detail)
            logger.debug(
                "transaction %s pending (check %d/%d)", tx_hash, attempt, self._max_attempts
            )
            if attempt < self._max_attempts:
                await self._sleep(self._poll_interval)

        logger.warning(
            "transaction %s not confirmed after %d checks", tx_hash, self._max_attempts
        )
        return TransactionOutcome(TrackerState.TIMEOUT, tx_hash, self._max_attempts, detail)

    async def submit_and_confirm(self, signed: SignedTransaction) -> TransactionOutcome:
        """Submit a signed transaction once and wait for its outcome.

        Raises:
            SubmissionError: If the immediate submission status is an error.
        """
        tx_hash = await self.submit(signed)
        return await self.confirm(tx_hash)
