# src/storyledger/api/routes_public_parts/stories.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from storyledger.api.errors import ApiError
from storyledger.api.routes_public_parts.common import (
    _chapter_json,
    _executor,
    _require_story_exists,
    _snapshot,
    _unwrap,
)
from storyledger.api.schemas import ChapterAddRequest, StoryCreateRequest
from storyledger.api.security import require_principal

router = APIRouter()

Json = Dict[str, Any]


@router.post("/stories", status_code=201)
def create_story(body: StoryCreateRequest, request: Request) -> Json:
    caller = require_principal(request)
    story_id = _unwrap(_executor(request).create_story(caller, body.title))
    return {"ok": True, "story_id": story_id}


@router.get("/stories")
def list_stories(request: Request) -> Json:
    st = _snapshot(request)
    return {"ok": True, "items": [s.to_json() for s in st.list_stories()]}


@router.get("/stories/{story_id}")
def get_story(story_id: int, request: Request) -> Json:
    story = _snapshot(request).get_story(story_id)
    if story is None:
        raise ApiError.not_found("not_found", "story not found", {"story_id": story_id})
    return {"ok": True, "story": story.to_json()}


@router.post("/stories/{story_id}/chapters", status_code=201)
def add_chapter(story_id: int, body: ChapterAddRequest, request: Request) -> Json:
    caller = require_principal(request)
    index = _unwrap(_executor(request).add_chapter(caller, story_id, body.content))
    return {"ok": True, "story_id": story_id, "chapter_index": index}


@router.get("/stories/{story_id}/chapters")
def list_chapters(story_id: int, request: Request) -> Json:
    st = _snapshot(request)
    _require_story_exists(st, story_id)
    items = [_chapter_json(story_id, idx, ch) for idx, ch in st.list_chapters(story_id)]
    return {"ok": True, "items": items}


@router.get("/stories/{story_id}/chapters/{index}")
def get_chapter(story_id: int, index: int, request: Request) -> Json:
    ch = _snapshot(request).get_chapter(story_id, index)
    if ch is None:
        raise ApiError.not_found("not_found", "chapter not found", {"story_id": story_id, "index": index})
    return {"ok": True, "chapter": _chapter_json(story_id, index, ch)}


@router.post("/stories/{story_id}/complete")
def complete_story(story_id: int, request: Request) -> Json:
    caller = require_principal(request)
    _unwrap(_executor(request).complete_story(caller, story_id))
    return {"ok": True, "story_id": story_id, "is_complete": True}


@router.get("/stories/{story_id}/contributors")
def list_contributors(story_id: int, request: Request) -> Json:
    st = _snapshot(request)
    _require_story_exists(st, story_id)
    return {"ok": True, "story_id": story_id, "items": st.list_contributors(story_id)}
