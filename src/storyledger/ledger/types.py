"""Record types held by the story ledger.

All records are plain dataclasses. Chapters are frozen; stories and plot
decisions are mutated in place by the apply modules, and only in the
directions the ledger allows (chapter count up, is_complete false->true,
vote counts up, is_open true->false).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict

from storyledger.runtime.errors import INVALID_OPTION, ApplyError

Json = Dict[str, Any]

StoryId = int
ChapterIndex = int
DecisionId = int
Principal = str


class VoteOption(IntEnum):
    OPTION_A = 0
    OPTION_B = 1

    @classmethod
    def parse(cls, raw: Any) -> "VoteOption":
        """Parse a wire value into a VoteOption.

        Accepts a VoteOption, the integers 0/1 (or their decimal strings),
        and the names "a"/"b" in any case. Everything else is invalid_option.
        """
        if isinstance(raw, VoteOption):
            return raw
        if isinstance(raw, bool):
            raise ApplyError(INVALID_OPTION, "option_out_of_range", {"option": raw})
        if isinstance(raw, int):
            if raw in (0, 1):
                return cls(raw)
            raise ApplyError(INVALID_OPTION, "option_out_of_range", {"option": raw})
        if isinstance(raw, str):
            s = raw.strip().lower()
            if s in {"0", "a"}:
                return cls.OPTION_A
            if s in {"1", "b"}:
                return cls.OPTION_B
        raise ApplyError(INVALID_OPTION, "option_out_of_range", {"option": raw})


@dataclass
class Story:
    id: StoryId
    title: str
    owner: Principal
    current_chapter: ChapterIndex = 0
    is_complete: bool = False

    def to_json(self) -> Json:
        return {
            "id": int(self.id),
            "title": self.title,
            "owner": self.owner,
            "current_chapter": int(self.current_chapter),
            "is_complete": bool(self.is_complete),
        }

    @staticmethod
    def from_json(j: Json) -> "Story":
        return Story(
            id=int(j["id"]),
            title=str(j.get("title", "")),
            owner=str(j.get("owner", "")),
            current_chapter=int(j.get("current_chapter", 0)),
            is_complete=bool(j.get("is_complete", False)),
        )


@dataclass(frozen=True)
class Chapter:
    content: str
    author: Principal

    def to_json(self) -> Json:
        return {"content": self.content, "author": self.author}

    @staticmethod
    def from_json(j: Json) -> "Chapter":
        return Chapter(content=str(j.get("content", "")), author=str(j.get("author", "")))


@dataclass
class PlotDecision:
    option_a: str
    option_b: str
    votes_a: int = 0
    votes_b: int = 0
    is_open: bool = True

    def tally(self) -> tuple[int, int]:
        return (int(self.votes_a), int(self.votes_b))

    def record_vote(self, option: VoteOption) -> None:
        if option is VoteOption.OPTION_A:
            self.votes_a += 1
        else:
            self.votes_b += 1

    def to_json(self) -> Json:
        return {
            "option_a": self.option_a,
            "option_b": self.option_b,
            "votes_a": int(self.votes_a),
            "votes_b": int(self.votes_b),
            "is_open": bool(self.is_open),
        }

    @staticmethod
    def from_json(j: Json) -> "PlotDecision":
        return PlotDecision(
            option_a=str(j.get("option_a", "")),
            option_b=str(j.get("option_b", "")),
            votes_a=int(j.get("votes_a", 0)),
            votes_b=int(j.get("votes_b", 0)),
            is_open=bool(j.get("is_open", True)),
        )
