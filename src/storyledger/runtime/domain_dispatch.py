# src/storyledger/runtime/domain_dispatch.py

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from storyledger.ledger.state import LedgerState
from storyledger.runtime.apply.plot import apply_plot
from storyledger.runtime.apply.stories import apply_stories
from storyledger.runtime.errors import INVALID_TX, TX_UNIMPLEMENTED, ApplyError
from storyledger.runtime.supported_txs import is_supported
from storyledger.runtime.tx_types import TxEnvelope

Json = Dict[str, Any]
ApplyFn = Callable[[LedgerState, TxEnvelope], Optional[Json]]


def _tx_type(env: TxEnvelope) -> str:
    return str(env.tx_type or "").strip().upper()


_APPLIERS: tuple[ApplyFn, ...] = (
    apply_stories,
    apply_plot,
)


def apply_tx(state: LedgerState, env: Any) -> Json:
    """Dispatch a TxEnvelope to the first domain applier that claims it.

    Appliers validate every precondition before mutating, but this function
    alone is not fail-atomic; use domain_apply.apply_tx_atomic for that.
    """
    if not isinstance(state, LedgerState):
        raise TypeError(f"state must be LedgerState, got {type(state)}")

    # Tests and tools pass raw dict envelopes.
    env_norm = TxEnvelope.from_json(env)

    t = _tx_type(env_norm)
    if not t:
        raise ApplyError(INVALID_TX, "missing_tx_type", {"tx_type": t})
    signer = str(env_norm.signer or "").strip()
    if not signer:
        raise ApplyError(INVALID_TX, "missing_signer", {"tx_type": t})
    if not is_supported(t):
        raise ApplyError(TX_UNIMPLEMENTED, "tx_type_not_implemented", {"tx_type": t})

    # One canonical identity for every applier: owner, author, contributor and admin checks.
    env_norm = replace(env_norm, signer=signer)

    for fn in _APPLIERS:
        try:
            out = fn(state, env_norm)
        except ApplyError:
            raise
        except Exception as e:
            raise ApplyError(
                "domain_error",
                type(e).__name__,
                {"tx_type": t, "domain": fn.__name__, "error": str(e)},
            ) from e

        if out is not None:
            return out

    raise ApplyError(TX_UNIMPLEMENTED, "tx_type_not_implemented", {"tx_type": t})
