from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from storyledger.ledger.types import (
    Chapter,
    ChapterIndex,
    DecisionId,
    PlotDecision,
    Principal,
    Story,
    StoryId,
)

Json = Dict[str, Any]


@dataclass
class LedgerState:
    """
    Owned state container for the story ledger.

    Four tables keyed by proper composite keys, plus the two id counters
    and host-supplied params (admin principal).
    """

    stories: Dict[StoryId, Story] = field(default_factory=dict)
    chapters: Dict[Tuple[StoryId, ChapterIndex], Chapter] = field(default_factory=dict)
    plot_decisions: Dict[Tuple[StoryId, DecisionId], PlotDecision] = field(default_factory=dict)
    contributors: Set[Tuple[StoryId, Principal]] = field(default_factory=set)

    last_story_id: StoryId = 0
    last_decision_id: DecisionId = 0

    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def genesis(cls, *, admin_principal: str) -> "LedgerState":
        return cls(params={"admin_principal": str(admin_principal)})

    def copy(self) -> "LedgerState":
        return copy.deepcopy(self)

    def restore(self, other: "LedgerState") -> None:
        """Replace contents in-place so holders of this object see `other`."""
        self.stories = other.stories
        self.chapters = other.chapters
        self.plot_decisions = other.plot_decisions
        self.contributors = other.contributors
        self.last_story_id = other.last_story_id
        self.last_decision_id = other.last_decision_id
        self.params = other.params

    def get_admin_principal(self) -> str:
        v = self.params.get("admin_principal")
        return str(v).strip() if v is not None else ""

    # ---- queries ----

    def get_story(self, story_id: StoryId) -> Optional[Story]:
        return self.stories.get(story_id)

    def list_stories(self) -> List[Story]:
        return [self.stories[k] for k in sorted(self.stories)]

    def get_chapter(self, story_id: StoryId, index: ChapterIndex) -> Optional[Chapter]:
        return self.chapters.get((story_id, index))

    def list_chapters(self, story_id: StoryId) -> List[Tuple[ChapterIndex, Chapter]]:
        out = [(idx, ch) for (sid, idx), ch in self.chapters.items() if sid == story_id]
        out.sort(key=lambda x: x[0])
        return out

    def get_decision(self, story_id: StoryId, decision_id: DecisionId) -> Optional[PlotDecision]:
        return self.plot_decisions.get((story_id, decision_id))

    def list_decisions(self, story_id: StoryId) -> List[Tuple[DecisionId, PlotDecision]]:
        out = [(did, d) for (sid, did), d in self.plot_decisions.items() if sid == story_id]
        out.sort(key=lambda x: x[0])
        return out

    def is_contributor(self, story_id: StoryId, principal: Principal) -> bool:
        return (story_id, principal) in self.contributors

    def list_contributors(self, story_id: StoryId) -> List[Principal]:
        return sorted(p for (sid, p) in self.contributors if sid == story_id)

    # ---- snapshot codec ----

    def to_json(self) -> Json:
        chapters: Dict[str, Dict[str, Json]] = {}
        for (sid, idx), ch in self.chapters.items():
            chapters.setdefault(str(sid), {})[str(idx)] = ch.to_json()

        decisions: Dict[str, Dict[str, Json]] = {}
        for (sid, did), d in self.plot_decisions.items():
            decisions.setdefault(str(sid), {})[str(did)] = d.to_json()

        contributors: Dict[str, List[str]] = {}
        for sid, p in sorted(self.contributors):
            contributors.setdefault(str(sid), []).append(p)

        return {
            "last_story_id": int(self.last_story_id),
            "last_decision_id": int(self.last_decision_id),
            "params": copy.deepcopy(self.params),
            "stories": {str(k): s.to_json() for k, s in self.stories.items()},
            "chapters": chapters,
            "plot_decisions": decisions,
            "contributors": contributors,
        }

    @classmethod
    def from_json(cls, j: Json) -> "LedgerState":
        if not isinstance(j, dict):
            raise ValueError("ledger snapshot must be a JSON object")

        st = cls(
            last_story_id=int(j.get("last_story_id", 0) or 0),
            last_decision_id=int(j.get("last_decision_id", 0) or 0),
            params=dict(j.get("params") or {}),
        )

        for k, rec in dict(j.get("stories") or {}).items():
            story = Story.from_json(rec)
            if story.id != int(k):
                raise ValueError(f"story key mismatch: key={k!r} id={story.id}")
            st.stories[story.id] = story

        for sid, by_idx in dict(j.get("chapters") or {}).items():
            for idx, rec in dict(by_idx).items():
                st.chapters[(int(sid), int(idx))] = Chapter.from_json(rec)

        for sid, by_did in dict(j.get("plot_decisions") or {}).items():
            for did, rec in dict(by_did).items():
                st.plot_decisions[(int(sid), int(did))] = PlotDecision.from_json(rec)

        for sid, principals in dict(j.get("contributors") or {}).items():
            for p in list(principals):
                st.contributors.add((int(sid), str(p)))

        return st
