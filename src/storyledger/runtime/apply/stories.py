# src/storyledger/runtime/apply/stories.py
from __future__ import annotations

from typing import Any, Dict, Optional

from storyledger.ledger.state import LedgerState
from storyledger.ledger.types import Chapter, Story
from storyledger.runtime.apply.payload import as_dict, require_id, require_str
from storyledger.runtime.gates import require_admin, require_open_story, require_story
from storyledger.runtime.tx_types import TxEnvelope

Json = Dict[str, Any]


def _apply_story_create(state: LedgerState, env: TxEnvelope) -> Json:
    p = as_dict(env.payload)
    title = require_str(p, "title")

    story_id = int(state.last_story_id) + 1
    state.stories[story_id] = Story(id=story_id, title=title, owner=str(env.signer))
    state.last_story_id = story_id
    return {"applied": True, "story_id": story_id}


def _apply_chapter_add(state: LedgerState, env: TxEnvelope) -> Json:
    """
    Append a chapter to an open story.

    Any signer may contribute; the story owner has no special standing here.
    """
    p = as_dict(env.payload)
    story_id = require_id(p, "story_id")
    content = require_str(p, "content")

    story = require_open_story(state, story_id)

    new_index = int(story.current_chapter) + 1
    author = str(env.signer)
    state.chapters[(story_id, new_index)] = Chapter(content=content, author=author)
    story.current_chapter = new_index
    state.contributors.add((story_id, author))
    return {"applied": True, "story_id": story_id, "chapter_index": new_index}


def _apply_story_complete(state: LedgerState, env: TxEnvelope) -> Json:
    p = as_dict(env.payload)
    story_id = require_id(p, "story_id")

    require_admin(state, env.signer, action="story_complete")
    story = require_story(state, story_id)

    already = bool(story.is_complete)
    story.is_complete = True
    return {"applied": True, "story_id": story_id, "already_complete": already}


_STORY_HANDLERS = {
    "STORY_CREATE": _apply_story_create,
    "STORY_CHAPTER_ADD": _apply_chapter_add,
    "STORY_COMPLETE": _apply_story_complete,
}


def apply_stories(state: LedgerState, env: TxEnvelope) -> Optional[Json]:
    t = str(env.tx_type or "").strip().upper()
    fn = _STORY_HANDLERS.get(t)
    if fn is None:
        return None
    return fn(state, env)
