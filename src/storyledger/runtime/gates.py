# src/storyledger/runtime/gates.py
from __future__ import annotations

from typing import Any

from storyledger.ledger.state import LedgerState
from storyledger.ledger.types import PlotDecision, Story
from storyledger.runtime.errors import NOT_FOUND, STORY_COMPLETE, UNAUTHORIZED, ApplyError


def _as_str(v: Any) -> str:
    return str(v).strip() if v is not None else ""


def is_admin(state: LedgerState, signer: str) -> bool:
    """True only when an admin principal is configured and matches `signer`.

    An empty admin principal matches nobody.
    """
    admin = state.get_admin_principal()
    return bool(admin) and _as_str(signer) == admin


def require_admin(state: LedgerState, signer: str, *, action: str) -> None:
    if not is_admin(state, signer):
        raise ApplyError(UNAUTHORIZED, "admin_required", {"action": action, "signer": _as_str(signer)})


def require_story(state: LedgerState, story_id: int) -> Story:
    story = state.get_story(story_id)
    if story is None:
        raise ApplyError(NOT_FOUND, "story_not_found", {"story_id": story_id})
    return story


def require_open_story(state: LedgerState, story_id: int) -> Story:
    story = require_story(state, story_id)
    if story.is_complete:
        raise ApplyError(STORY_COMPLETE, "story_is_complete", {"story_id": story_id})
    return story


def require_decision(state: LedgerState, story_id: int, decision_id: int) -> PlotDecision:
    d = state.get_decision(story_id, decision_id)
    if d is None:
        raise ApplyError(NOT_FOUND, "decision_not_found", {"story_id": story_id, "decision_id": decision_id})
    return d
