from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Any, Dict, Optional

from storyledger.ledger.state import LedgerState
from storyledger.runtime.domain_apply import apply_tx_atomic
from storyledger.runtime.errors import STORAGE_ERROR, ApplyError
from storyledger.runtime.ledger_logging import log_event
from storyledger.runtime.metrics import inc_counter, set_gauge
from storyledger.runtime.sqlite_db import SqliteDB, SqliteLedgerStore
from storyledger.runtime.state_invariants import check_invariants
from storyledger.runtime.tx_types import TxEnvelope, TxResult

Json = Dict[str, Any]

log = logging.getLogger("storyledger.executor")


class ExecutorError(RuntimeError):
    pass


class StoryLedgerExecutor:
    """Single-writer host for the story ledger.

    Every operation runs under one lock, so the core sees the
    one-operation-at-a-time contract it assumes. When a db_path is given,
    the post-apply snapshot is written to SQLite before it is committed in
    memory; a write failure leaves both unchanged and returns storage_error.

    Public operations return TxResult; ledger and storage failures never raise.
    """

    def __init__(
        self,
        *,
        admin_principal: str,
        ledger_id: str = "storyledger-dev",
        db_path: Optional[str] = None,
    ) -> None:
        self.ledger_id = str(ledger_id)
        self.admin_principal = str(admin_principal).strip()
        self.db_path = str(db_path) if db_path else None

        self._lock = threading.Lock()
        self._store: Optional[SqliteLedgerStore] = None

        if self.db_path:
            self._store = SqliteLedgerStore(db=SqliteDB(path=self.db_path))

        if self._store is not None and self._store.exists():
            self.state = self._load_fail_closed(self._store.read())
        else:
            self.state = LedgerState.genesis(admin_principal=self.admin_principal)
            self.state.params["ledger_id"] = self.ledger_id
            if self._store is not None:
                self._store.write(self.state.to_json())

        self._update_gauges()

    def _load_fail_closed(self, raw: Json) -> LedgerState:
        st = check_invariants(LedgerState.from_json(raw))

        st_ledger_id = str(st.params.get("ledger_id") or "").strip()
        if st_ledger_id and st_ledger_id != self.ledger_id:
            raise ExecutorError(
                f"ledger_id mismatch: db={st_ledger_id!r} executor={self.ledger_id!r}. Refuse to start."
            )
        st.params["ledger_id"] = self.ledger_id

        # The host is authoritative for the admin role.
        prev_admin = st.get_admin_principal()
        if prev_admin != self.admin_principal:
            log_event(log, "admin_principal_changed", previous=prev_admin, current=self.admin_principal)
            st.params["admin_principal"] = self.admin_principal
        return st

    def _persist(self, st: LedgerState) -> None:
        if self._store is not None:
            self._store.write(st.to_json())

    def _update_gauges(self) -> None:
        set_gauge("stories", len(self.state.stories))
        set_gauge("chapters", len(self.state.chapters))
        set_gauge("plot_decisions", len(self.state.plot_decisions))

    # ---- writes ----

    def submit(self, env: Any) -> TxResult:
        env_norm = TxEnvelope.from_json(env)
        with self._lock:
            try:
                meta = apply_tx_atomic(self.state, env_norm, before_commit=self._persist)
            except ApplyError as e:
                inc_counter(f"tx_rejected_{e.code}")
                log_event(
                    log,
                    "tx_rejected",
                    tx_type=env_norm.tx_type,
                    signer=env_norm.signer,
                    code=e.code,
                    reason=e.reason,
                )
                return TxResult.from_error(e)
            except (sqlite3.Error, OSError) as e:
                # Snapshot write failed before commit; memory and disk still agree.
                inc_counter(f"tx_rejected_{STORAGE_ERROR}")
                log_event(
                    log,
                    "tx_persist_failed",
                    level=logging.ERROR,
                    tx_type=env_norm.tx_type,
                    signer=env_norm.signer,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return TxResult.failure(STORAGE_ERROR, type(e).__name__, {"error": str(e)})

            inc_counter("tx_applied_total")
            self._update_gauges()
            log_event(log, "tx_applied", tx_type=env_norm.tx_type, signer=env_norm.signer, meta=meta)
            return TxResult.success(meta)

    def _submit_value(self, env: TxEnvelope, key: Optional[str]) -> TxResult:
        res = self.submit(env)
        if not res.ok:
            return res
        return TxResult.success(res.value.get(key) if key else None)

    def create_story(self, caller: str, title: str) -> TxResult:
        env = TxEnvelope("STORY_CREATE", caller, {"title": title})
        return self._submit_value(env, "story_id")

    def add_chapter(self, caller: str, story_id: int, content: str) -> TxResult:
        env = TxEnvelope("STORY_CHAPTER_ADD", caller, {"story_id": story_id, "content": content})
        return self._submit_value(env, "chapter_index")

    def complete_story(self, caller: str, story_id: int) -> TxResult:
        env = TxEnvelope("STORY_COMPLETE", caller, {"story_id": story_id})
        return self._submit_value(env, None)

    def create_plot_decision(self, caller: str, story_id: int, option_a: str, option_b: str) -> TxResult:
        env = TxEnvelope(
            "PLOT_DECISION_CREATE",
            caller,
            {"story_id": story_id, "option_a": option_a, "option_b": option_b},
        )
        return self._submit_value(env, "decision_id")

    def vote_on_plot(self, caller: str, story_id: int, decision_id: int, option: Any) -> TxResult:
        env = TxEnvelope(
            "PLOT_VOTE_CAST",
            caller,
            {"story_id": story_id, "decision_id": decision_id, "option": option},
        )
        return self._submit_value(env, None)

    def close_voting(self, caller: str, story_id: int, decision_id: int) -> TxResult:
        env = TxEnvelope("PLOT_VOTING_CLOSE", caller, {"story_id": story_id, "decision_id": decision_id})
        return self._submit_value(env, None)

    # ---- reads ----

    def read_state(self) -> LedgerState:
        """Return a private copy of the current state."""
        with self._lock:
            return self.state.copy()

    def snapshot_json(self) -> Json:
        with self._lock:
            return self.state.to_json()
