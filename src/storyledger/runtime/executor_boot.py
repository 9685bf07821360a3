# src/storyledger/runtime/executor_boot.py

from __future__ import annotations

from typing import Optional

from storyledger.runtime.executor import StoryLedgerExecutor
from storyledger.runtime.ledger_config import LedgerConfig, load_ledger_config


def build_executor(cfg: Optional[LedgerConfig] = None) -> StoryLedgerExecutor:
    """
    Build a StoryLedgerExecutor from an explicit config or, if omitted,
    from load_ledger_config() (config file + STORYLEDGER_* env).
    """
    c = cfg or load_ledger_config()
    return StoryLedgerExecutor(
        admin_principal=c.admin_principal,
        ledger_id=c.ledger_id,
        db_path=c.db_path if c.persist else None,
    )
