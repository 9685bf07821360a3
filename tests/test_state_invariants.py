from __future__ import annotations

import pytest

from storyledger.ledger.state import LedgerState
from storyledger.ledger.types import Chapter, PlotDecision, Story
from storyledger.runtime.domain_apply import execute_tx
from storyledger.runtime.state_invariants import InvariantViolation, check_invariants, find_violations
from storyledger.runtime.tx_types import TxEnvelope

ADMIN = "contract-owner"


def test_invariants_hold_after_mixed_operations(state: LedgerState) -> None:
    ops = [
        ("STORY_CREATE", "u1", {"title": "a"}),
        ("STORY_CREATE", "u2", {"title": "b"}),
        ("STORY_CHAPTER_ADD", "u2", {"story_id": 1, "content": "x"}),
        ("STORY_CHAPTER_ADD", "u3", {"story_id": 1, "content": "y"}),
        ("STORY_CHAPTER_ADD", "u3", {"story_id": 9, "content": "missing"}),
        ("PLOT_DECISION_CREATE", "u1", {"story_id": 2, "option_a": "l", "option_b": "r"}),
        ("PLOT_VOTE_CAST", "u4", {"story_id": 2, "decision_id": 1, "option": 5}),
        ("PLOT_VOTE_CAST", "u4", {"story_id": 2, "decision_id": 1, "option": 1}),
        ("STORY_COMPLETE", "u1", {"story_id": 1}),
        ("STORY_COMPLETE", ADMIN, {"story_id": 1}),
        ("STORY_CHAPTER_ADD", "u5", {"story_id": 1, "content": "late"}),
        ("PLOT_VOTING_CLOSE", ADMIN, {"story_id": 2, "decision_id": 1}),
        ("PLOT_VOTE_CAST", "u4", {"story_id": 2, "decision_id": 1, "option": 0}),
    ]
    for t, signer, payload in ops:
        execute_tx(state, TxEnvelope(t, signer, payload))
        assert find_violations(state) == []

    assert check_invariants(state) is state
    assert state.get_story(1).current_chapter == 2
    assert state.get_decision(2, 1).tally() == (0, 1)


def test_check_invariants_rejects_non_state() -> None:
    with pytest.raises(TypeError):
        check_invariants({"stories": {}})


def test_detects_chapter_gap_and_orphans() -> None:
    st = LedgerState.genesis(admin_principal=ADMIN)
    st.stories[1] = Story(id=1, title="t", owner="u1", current_chapter=2)
    st.last_story_id = 1
    st.chapters[(1, 2)] = Chapter(content="c", author="u2")
    st.chapters[(5, 1)] = Chapter(content="orphan", author="u3")
    st.contributors.add((1, "u2"))
    st.contributors.add((1, "ghost"))

    with pytest.raises(InvariantViolation) as e:
        check_invariants(st)

    problems = e.value.problems
    assert any("chapters [2]" in p for p in problems)
    assert any("chapter (5,1)" in p for p in problems)
    assert any("(1,ghost)" in p for p in problems)


def test_detects_bad_counters_and_votes() -> None:
    st = LedgerState.genesis(admin_principal=ADMIN)
    st.stories[3] = Story(id=3, title="t", owner="u1")
    st.plot_decisions[(3, 4)] = PlotDecision(option_a="a", option_b="b", votes_a=-1)
    st.plot_decisions[(3, 5)] = PlotDecision(option_a="a", option_b="b")
    st.last_decision_id = 4

    problems = find_violations(st)
    assert any("exceed last_story_id" in p for p in problems)
    assert any("negative votes" in p for p in problems)
    assert any("(3,5): id above last_decision_id" in p for p in problems)


def test_detects_duplicate_decision_ids_across_stories() -> None:
    st = LedgerState.genesis(admin_principal=ADMIN)
    for sid in (1, 2):
        st.stories[sid] = Story(id=sid, title="t", owner="u")
        st.plot_decisions[(sid, 1)] = PlotDecision(option_a="a", option_b="b")
    st.last_story_id = 2
    st.last_decision_id = 1

    assert "decision ids are not globally unique" in find_violations(st)


def test_modules_carry_their_docstrings() -> None:
    from storyledger.api import schemas
    from storyledger.ledger import types
    from storyledger.runtime import state_invariants

    assert state_invariants.__doc__.startswith("State invariants")
    assert types.__doc__.startswith("Record types")
    assert schemas.__doc__.startswith("Pydantic request schemas")
