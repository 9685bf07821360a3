from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure local "src/" takes precedence over any globally-installed "storyledger" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

ADMIN = "contract-owner"


@pytest.fixture
def state():
    from storyledger.ledger.state import LedgerState

    return LedgerState.genesis(admin_principal=ADMIN)


@pytest.fixture
def executor():
    from storyledger.runtime.executor import StoryLedgerExecutor

    return StoryLedgerExecutor(admin_principal=ADMIN, ledger_id="storyledger-test")
