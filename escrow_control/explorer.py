"""Human-facing explorer links for transactions."""

from __future__ import annotations

EXPLORER_BASE_URL = "https://stellar.expert/explorer"


def explorer_link(tx_hash: str, network: str = "testnet") -> str:
    """Explorer URL for a transaction hash. Pure string template."""
    return f"{EXPLORER_BASE_URL}/{network}/tx/{tx_hash}"
