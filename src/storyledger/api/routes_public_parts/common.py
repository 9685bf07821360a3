from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from storyledger.api.errors import ApiError
from storyledger.ledger.state import LedgerState
from storyledger.ledger.types import Chapter, PlotDecision
from storyledger.runtime.executor import StoryLedgerExecutor
from storyledger.runtime.tx_types import TxResult

Json = Dict[str, Any]


def _executor(request: Request) -> StoryLedgerExecutor:
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _snapshot(request: Request) -> LedgerState:
    return _executor(request).read_state()


def _unwrap(res: TxResult) -> Any:
    """Return the success value or raise the matching ApiError."""
    if not res.ok:
        raise ApiError.from_tx_result(res)
    return res.value


def _require_story_exists(st: LedgerState, story_id: int) -> None:
    if st.get_story(story_id) is None:
        raise ApiError.not_found("not_found", "story not found", {"story_id": story_id})


def _chapter_json(story_id: int, index: int, ch: Chapter) -> Json:
    return {"story_id": story_id, "index": index, **ch.to_json()}


def _decision_json(story_id: int, decision_id: int, d: PlotDecision) -> Json:
    out = {"story_id": story_id, "decision_id": decision_id, **d.to_json()}
    out["votes"] = list(d.tally())
    return out
