from __future__ import annotations

import pytest

from storyledger.ledger.state import LedgerState
from storyledger.runtime.domain_apply import ApplyError, apply_tx, apply_tx_atomic
from storyledger.runtime.tx_types import TxEnvelope

ADMIN = "contract-owner"


def _tx(tx_type: str, signer: str, **payload) -> TxEnvelope:
    return TxEnvelope(tx_type=tx_type, signer=signer, payload=payload)


def test_create_story_assigns_sequential_ids_regardless_of_caller(state: LedgerState) -> None:
    ids = [
        apply_tx(state, _tx("STORY_CREATE", signer, title=f"t{i}"))["story_id"]
        for i, signer in enumerate(["user1", "user2", "user1", ADMIN])
    ]
    assert ids == [1, 2, 3, 4]
    assert state.last_story_id == 4


def test_create_story_stores_initial_record_and_owner(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "user1", title="The Great Adventure"))

    story = state.get_story(1)
    assert story is not None
    assert story.title == "The Great Adventure"
    assert story.current_chapter == 0
    assert story.is_complete is False
    assert story.owner == "user1"


def test_add_chapter_by_non_owner_records_author_and_contributor(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "user1", title="The Great Adventure"))
    meta = apply_tx(state, _tx("STORY_CHAPTER_ADD", "user2", story_id=1, content="It was a dark and stormy night..."))

    assert meta["chapter_index"] == 1
    ch = state.get_chapter(1, 1)
    assert ch is not None
    assert ch.content == "It was a dark and stormy night..."
    assert ch.author == "user2"
    assert state.is_contributor(1, "user2")
    assert not state.is_contributor(1, "user1")


def test_chapter_indices_are_dense_per_story(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "u1", title="a"))
    apply_tx(state, _tx("STORY_CREATE", "u1", title="b"))

    for n in range(5):
        apply_tx(state, _tx("STORY_CHAPTER_ADD", f"w{n % 2}", story_id=1, content=f"a{n}"))
    apply_tx(state, _tx("STORY_CHAPTER_ADD", "w9", story_id=2, content="b0"))

    assert state.get_story(1).current_chapter == 5
    assert [idx for idx, _ in state.list_chapters(1)] == [1, 2, 3, 4, 5]
    assert state.get_story(2).current_chapter == 1
    assert [idx for idx, _ in state.list_chapters(2)] == [1]
    assert state.list_contributors(1) == ["w0", "w1"]


def test_add_chapter_to_missing_story_is_not_found(state: LedgerState) -> None:
    with pytest.raises(ApplyError) as e:
        apply_tx(state, _tx("STORY_CHAPTER_ADD", "u2", story_id=7, content="x"))
    assert e.value.code == "not_found"
    assert state.chapters == {}
    assert state.contributors == set()


def test_complete_story_requires_admin_not_owner(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "user1", title="t"))

    with pytest.raises(ApplyError) as e:
        apply_tx(state, _tx("STORY_COMPLETE", "user1", story_id=1))
    assert e.value.code == "unauthorized"
    assert state.get_story(1).is_complete is False

    apply_tx(state, _tx("STORY_COMPLETE", ADMIN, story_id=1))
    assert state.get_story(1).is_complete is True


def test_unauthorized_is_checked_before_existence(state: LedgerState) -> None:
    with pytest.raises(ApplyError) as e:
        apply_tx(state, _tx("STORY_COMPLETE", "mallory", story_id=99))
    assert e.value.code == "unauthorized"

    with pytest.raises(ApplyError) as e:
        apply_tx(state, _tx("STORY_COMPLETE", ADMIN, story_id=99))
    assert e.value.code == "not_found"


def test_complete_story_twice_is_a_noop(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "user1", title="t"))
    first = apply_tx(state, _tx("STORY_COMPLETE", ADMIN, story_id=1))
    before = state.to_json()

    second = apply_tx(state, _tx("STORY_COMPLETE", ADMIN, story_id=1))
    assert first["already_complete"] is False
    assert second["already_complete"] is True
    assert state.to_json() == before


def test_completed_story_rejects_chapters_and_decisions_without_mutation(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "user1", title="t"))
    apply_tx(state, _tx("STORY_CHAPTER_ADD", "user2", story_id=1, content="c1"))
    apply_tx(state, _tx("STORY_COMPLETE", ADMIN, story_id=1))
    before = state.to_json()

    for env in (
        _tx("STORY_CHAPTER_ADD", "user3", story_id=1, content="This should fail"),
        _tx("PLOT_DECISION_CREATE", "user3", story_id=1, option_a="l", option_b="r"),
    ):
        with pytest.raises(ApplyError) as e:
            apply_tx_atomic(state, env)
        assert e.value.code == "story_complete"

    assert state.to_json() == before
    assert state.last_decision_id == 0


def test_empty_title_and_content_are_accepted(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "u1", title=""))
    apply_tx(state, _tx("STORY_CHAPTER_ADD", "u1", story_id=1, content=""))
    assert state.get_chapter(1, 1).content == ""


@pytest.mark.parametrize(
    "payload,reason",
    [
        ({}, "missing_title"),
        ({"title": 5}, "invalid_title"),
    ],
)
def test_create_story_rejects_malformed_payload(state: LedgerState, payload: dict, reason: str) -> None:
    with pytest.raises(ApplyError) as e:
        apply_tx(state, TxEnvelope("STORY_CREATE", "u1", payload))
    assert e.value.code == "invalid_payload"
    assert e.value.reason == reason
    assert state.last_story_id == 0


@pytest.mark.parametrize("story_id", [True, 1.5, "abc", -1, None, "²", "1²"])
def test_add_chapter_rejects_non_integer_story_id(state: LedgerState, story_id) -> None:
    apply_tx(state, _tx("STORY_CREATE", "u1", title="t"))
    with pytest.raises(ApplyError) as e:
        apply_tx(state, _tx("STORY_CHAPTER_ADD", "u2", story_id=story_id, content="x"))
    assert e.value.code == "invalid_payload"


def test_story_id_accepts_decimal_string(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", "u1", title="t"))
    meta = apply_tx(state, _tx("STORY_CHAPTER_ADD", "u2", story_id="1", content="x"))
    assert meta["story_id"] == 1
    assert meta["chapter_index"] == 1


def test_signer_whitespace_is_stripped_once_for_every_role(state: LedgerState) -> None:
    apply_tx(state, _tx("STORY_CREATE", " user1 ", title="t"))
    apply_tx(state, _tx("STORY_CHAPTER_ADD", " user2", story_id=1, content="a"))
    apply_tx(state, _tx("STORY_CHAPTER_ADD", "user2\t", story_id=1, content="b"))

    assert state.get_story(1).owner == "user1"
    assert state.get_chapter(1, 1).author == "user2"
    assert state.list_contributors(1) == ["user2"]

    apply_tx(state, _tx("STORY_COMPLETE", f"  {ADMIN} ", story_id=1))
    assert state.get_story(1).is_complete is True
