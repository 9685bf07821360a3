"""State invariants for the story ledger.

Apply modules maintain these by construction. This module re-checks them
over a whole LedgerState so hosts can fail closed when loading a persisted
snapshot, and so tests can assert them after arbitrary operation sequences.

Checked:

  - every chapter, plot decision and contributor mark references a story
  - story.current_chapter equals its chapter count, indices dense 1..N
  - each contributor mark is backed by a chapter authored by that principal
  - vote counts are non-negative
  - id counters are at least the largest allocated id
"""

from __future__ import annotations

from typing import Any, Dict, List

from storyledger.ledger.state import LedgerState

Json = Dict[str, Any]


class InvariantViolation(ValueError):
    def __init__(self, problems: List[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = list(problems)


def find_violations(st: LedgerState) -> List[str]:
    problems: List[str] = []

    for sid, story in st.stories.items():
        if story.id != sid:
            problems.append(f"story {sid}: id field is {story.id}")
        if story.current_chapter < 0:
            problems.append(f"story {sid}: negative current_chapter")

    indices: Dict[int, List[int]] = {}
    for (sid, idx) in st.chapters:
        if sid not in st.stories:
            problems.append(f"chapter ({sid},{idx}): story missing")
            continue
        indices.setdefault(sid, []).append(idx)

    for sid, story in st.stories.items():
        have = sorted(indices.get(sid, []))
        want = list(range(1, int(story.current_chapter) + 1))
        if have != want:
            problems.append(f"story {sid}: chapters {have} do not match current_chapter={story.current_chapter}")

    for (sid, did), d in st.plot_decisions.items():
        if sid not in st.stories:
            problems.append(f"decision ({sid},{did}): story missing")
        if d.votes_a < 0 or d.votes_b < 0:
            problems.append(f"decision ({sid},{did}): negative votes")
        if did > st.last_decision_id:
            problems.append(f"decision ({sid},{did}): id above last_decision_id={st.last_decision_id}")

    decision_ids = [did for (_, did) in st.plot_decisions]
    if len(decision_ids) != len(set(decision_ids)):
        problems.append("decision ids are not globally unique")

    authors = {(sid, ch.author) for (sid, _), ch in st.chapters.items()}
    for (sid, p) in st.contributors:
        if sid not in st.stories:
            problems.append(f"contributor ({sid},{p}): story missing")
        elif (sid, p) not in authors:
            problems.append(f"contributor ({sid},{p}): no authored chapter")

    if st.stories and max(st.stories) > st.last_story_id:
        problems.append(f"story ids exceed last_story_id={st.last_story_id}")

    return problems


def check_invariants(st: Any) -> LedgerState:
    """Validate `st` and return it.

    Raises:
        TypeError: if st is not a LedgerState
        InvariantViolation: listing every broken invariant
    """
    if not isinstance(st, LedgerState):
        raise TypeError(f"state must be LedgerState, got {type(st)}")

    problems = find_violations(st)
    if problems:
        raise InvariantViolation(problems)
    return st


__all__ = ["InvariantViolation", "check_invariants", "find_violations"]
