# src/storyledger/runtime/domain_apply.py
# ---------------------------------------------------------------------------
# Public, stable import path for applying tx envelopes.
# ---------------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from storyledger.ledger.state import LedgerState
from storyledger.runtime.domain_dispatch import apply_tx
from storyledger.runtime.errors import ApplyError
from storyledger.runtime.tx_types import TxEnvelope, TxResult

Json = Dict[str, Any]


def apply_tx_atomic(
    state: LedgerState,
    env: Any,
    *,
    before_commit: Optional[Callable[[LedgerState], None]] = None,
) -> Json:
    """Apply a tx with fail-atomic semantics.

    On success:
      - before_commit (if given) sees the post-apply state first; if it
        raises, nothing is committed.
      - state is then updated as if apply_tx() ran directly.

    On ApplyError:
      - state remains unchanged and the error propagates.
    """
    env_norm = TxEnvelope.from_json(env)

    # Apply on a deep copy; commit only on success.
    snapshot = state.copy()
    meta = apply_tx(snapshot, env_norm)

    if before_commit is not None:
        before_commit(snapshot)

    # Commit in-place so callers holding references to `state` see the update.
    state.restore(snapshot)
    return meta


def execute_tx(state: LedgerState, env: Any) -> TxResult:
    """Boundary form of apply_tx_atomic: never raises ApplyError."""
    try:
        return TxResult.success(apply_tx_atomic(state, env))
    except ApplyError as e:
        return TxResult.from_error(e)


__all__ = ["ApplyError", "apply_tx", "apply_tx_atomic", "execute_tx", "Json"]
