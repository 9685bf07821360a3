from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NOT_FOUND = "not_found"
STORY_COMPLETE = "story_complete"
DECISION_CLOSED = "decision_closed"
INVALID_OPTION = "invalid_option"
UNAUTHORIZED = "unauthorized"
INVALID_PAYLOAD = "invalid_payload"
INVALID_TX = "invalid_tx"
TX_UNIMPLEMENTED = "tx_unimplemented"
STORAGE_ERROR = "storage_error"


@dataclass
class ApplyError(Exception):
    """Canonical error type for story ledger apply and dispatch failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"
