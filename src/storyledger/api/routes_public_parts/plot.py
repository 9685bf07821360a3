# src/storyledger/api/routes_public_parts/plot.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from storyledger.api.errors import ApiError
from storyledger.api.routes_public_parts.common import (
    _decision_json,
    _executor,
    _require_story_exists,
    _snapshot,
    _unwrap,
)
from storyledger.api.schemas import PlotDecisionCreateRequest, VoteCastRequest
from storyledger.api.security import require_principal

router = APIRouter()

Json = Dict[str, Any]


@router.post("/stories/{story_id}/decisions", status_code=201)
def create_plot_decision(story_id: int, body: PlotDecisionCreateRequest, request: Request) -> Json:
    caller = require_principal(request)
    decision_id = _unwrap(_executor(request).create_plot_decision(caller, story_id, body.option_a, body.option_b))
    return {"ok": True, "story_id": story_id, "decision_id": decision_id}


@router.get("/stories/{story_id}/decisions")
def list_plot_decisions(story_id: int, request: Request) -> Json:
    st = _snapshot(request)
    _require_story_exists(st, story_id)
    items = [_decision_json(story_id, did, d) for did, d in st.list_decisions(story_id)]
    return {"ok": True, "items": items}


@router.get("/stories/{story_id}/decisions/{decision_id}")
def get_plot_decision(story_id: int, decision_id: int, request: Request) -> Json:
    d = _snapshot(request).get_decision(story_id, decision_id)
    if d is None:
        raise ApiError.not_found(
            "not_found", "decision not found", {"story_id": story_id, "decision_id": decision_id}
        )
    return {"ok": True, "decision": _decision_json(story_id, decision_id, d)}


@router.post("/stories/{story_id}/decisions/{decision_id}/votes")
def vote_on_plot(story_id: int, decision_id: int, body: VoteCastRequest, request: Request) -> Json:
    caller = require_principal(request)
    _unwrap(_executor(request).vote_on_plot(caller, story_id, decision_id, body.option))
    return {"ok": True, "story_id": story_id, "decision_id": decision_id}


@router.post("/stories/{story_id}/decisions/{decision_id}/close")
def close_voting(story_id: int, decision_id: int, request: Request) -> Json:
    caller = require_principal(request)
    _unwrap(_executor(request).close_voting(caller, story_id, decision_id))
    return {"ok": True, "story_id": story_id, "decision_id": decision_id, "is_open": False}
