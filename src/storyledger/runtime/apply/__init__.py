# src/storyledger/runtime/apply/__init__.py
"""Domain-specific apply modules.

These modules implement deterministic ledger state transitions for subsets
of tx types. Each exposes one `apply_*` function that returns None for tx
types it does not claim.

NOTE: Keep this package import-safe (no imports of domain_dispatch).
"""

from __future__ import annotations

__all__ = [
    "stories",
    "plot",
]
