"""
Ledger context — the explicit, constructed-once connection holder.

A LedgerContext bundles the configuration with the Soroban client (and
through it the shared HTTP connection). It is created once and passed to
every component instead of being reached through a hidden global, so
tests substitute a fake client by constructing their own context.

``get_default_context()`` provides the process-wide instance for
applications that want one: created lazily from the environment on first
use and reused until ``close_default_context()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from escrow_control.config import EscrowConfig
from escrow_control.soroban.client import SorobanClient
from escrow_control.soroban.jsonrpc_client import JsonRpcClient
from escrow_control.soroban.transport import HttpxTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerContext:
    """Configuration plus the shared ledger client.

    Attributes:
        config: Immutable configuration snapshot.
        client: Soroban client shared by all operations.
    """

    config: EscrowConfig
    client: SorobanClient

    @classmethod
    def from_config(cls, config: EscrowConfig) -> LedgerContext:
        """Build a context with a JSON-RPC client over a shared httpx transport."""
        transport = HttpxTransport(timeout=config.rpc_timeout_seconds)
        return cls(config=config, client=JsonRpcClient(config.rpc_url, transport))

    async def aclose(self) -> None:
        """Release the underlying connection, if the client owns one."""
        transport = getattr(self.client, "transport", None)
        close = getattr(transport, "aclose", None)
        if close is not None:
            await close()


_default_context: LedgerContext | None = None


def get_default_context() -> LedgerContext:
    """Return the process-wide context, creating it from the environment once."""
    global _default_context
    if _default_context is None:
        config = EscrowConfig.from_env()
        logger.debug("creating default ledger context for %s", config.rpc_url)
        _default_context = LedgerContext.from_config(config)
    return _default_context


async def close_default_context() -> None:
    """Close and forget the process-wide context."""
    global _default_context
    if _default_context is not None:
        context, _default_context = _default_context, None
        await context.aclose()
