# src/storyledger/runtime/apply/plot.py
from __future__ import annotations

from typing import Any, Dict, Optional

from storyledger.ledger.state import LedgerState
from storyledger.ledger.types import PlotDecision, VoteOption
from storyledger.runtime.apply.payload import as_dict, require_id, require_present, require_str
from storyledger.runtime.errors import DECISION_CLOSED, ApplyError
from storyledger.runtime.gates import require_admin, require_decision, require_open_story
from storyledger.runtime.tx_types import TxEnvelope

Json = Dict[str, Any]


def _apply_plot_decision_create(state: LedgerState, env: TxEnvelope) -> Json:
    p = as_dict(env.payload)
    story_id = require_id(p, "story_id")
    option_a = require_str(p, "option_a")
    option_b = require_str(p, "option_b")

    require_open_story(state, story_id)

    # Decision ids are global across stories.
    decision_id = int(state.last_decision_id) + 1
    state.plot_decisions[(story_id, decision_id)] = PlotDecision(option_a=option_a, option_b=option_b)
    state.last_decision_id = decision_id
    return {"applied": True, "story_id": story_id, "decision_id": decision_id}


def _apply_plot_vote_cast(state: LedgerState, env: TxEnvelope) -> Json:
    """
    Record one vote.

    Repeat votes from the same signer are counted; the ledger keeps tallies,
    not voter rolls.
    """
    p = as_dict(env.payload)
    story_id = require_id(p, "story_id")
    decision_id = require_id(p, "decision_id")
    raw_option = require_present(p, "option")

    decision = require_decision(state, story_id, decision_id)
    if not decision.is_open:
        raise ApplyError(DECISION_CLOSED, "voting_closed", {"story_id": story_id, "decision_id": decision_id})

    option = VoteOption.parse(raw_option)
    decision.record_vote(option)
    return {
        "applied": True,
        "story_id": story_id,
        "decision_id": decision_id,
        "option": int(option),
        "votes": list(decision.tally()),
    }


def _apply_plot_voting_close(state: LedgerState, env: TxEnvelope) -> Json:
    p = as_dict(env.payload)
    story_id = require_id(p, "story_id")
    decision_id = require_id(p, "decision_id")

    require_admin(state, env.signer, action="plot_voting_close")
    decision = require_decision(state, story_id, decision_id)

    already = not decision.is_open
    decision.is_open = False
    return {"applied": True, "story_id": story_id, "decision_id": decision_id, "already_closed": already}


_PLOT_HANDLERS = {
    "PLOT_DECISION_CREATE": _apply_plot_decision_create,
    "PLOT_VOTE_CAST": _apply_plot_vote_cast,
    "PLOT_VOTING_CLOSE": _apply_plot_voting_close,
}


def apply_plot(state: LedgerState, env: TxEnvelope) -> Optional[Json]:
    t = str(env.tx_type or "").strip().upper()
    fn = _PLOT_HANDLERS.get(t)
    if fn is None:
        return None
    return fn(state, env)
