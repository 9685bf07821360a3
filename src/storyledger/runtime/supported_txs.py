# src/storyledger/runtime/supported_txs.py
"""Tx types this build implements.

The dispatch router claims exactly these; anything else fails closed with
tx_unimplemented.
"""

from __future__ import annotations

from typing import FrozenSet

STORY_TX_TYPES: FrozenSet[str] = frozenset(
    {
        "STORY_CREATE",
        "STORY_CHAPTER_ADD",
        "STORY_COMPLETE",
    }
)

PLOT_TX_TYPES: FrozenSet[str] = frozenset(
    {
        "PLOT_DECISION_CREATE",
        "PLOT_VOTE_CAST",
        "PLOT_VOTING_CLOSE",
    }
)

SUPPORTED_TX_TYPES: FrozenSet[str] = STORY_TX_TYPES | PLOT_TX_TYPES


def is_supported(tx_type: str) -> bool:
    return str(tx_type or "").strip().upper() in SUPPORTED_TX_TYPES


__all__ = ["PLOT_TX_TYPES", "STORY_TX_TYPES", "SUPPORTED_TX_TYPES", "is_supported"]
