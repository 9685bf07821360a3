from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from storyledger.runtime.errors import ApplyError


@dataclass(frozen=True)
class TxResult:
    """Outcome of one ledger operation as seen by the host.

    Exactly one of `value` (on success) or `code`/`reason` (on failure)
    is meaningful.
    """

    ok: bool
    value: Any = None
    code: str = "ok"
    reason: str = "applied"
    details: Optional[Dict[str, Any]] = None

    def __iter__(self) -> Iterator[Any]:
        """Allow `ok, value = ledger.create_story(...)` unpacking."""
        yield self.ok
        yield self.value if self.ok else ApplyError(self.code, self.reason, self.details)

    @staticmethod
    def success(value: Any = None) -> "TxResult":
        return TxResult(True, value)

    @staticmethod
    def failure(code: str, reason: str, details: Optional[Dict[str, Any]] = None) -> "TxResult":
        return TxResult(False, None, code, reason, details)

    @staticmethod
    def from_error(err: ApplyError) -> "TxResult":
        details = err.details if isinstance(err.details, dict) else None
        return TxResult(False, None, str(err.code), str(err.reason), details)

    def unwrap(self) -> Any:
        if not self.ok:
            raise ApplyError(self.code, self.reason, self.details)
        return self.value


@dataclass(frozen=True)
class TxEnvelope:
    tx_type: str
    signer: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_json(j: Any) -> "TxEnvelope":
        if isinstance(j, TxEnvelope):
            return j
        if not isinstance(j, dict):
            j = dict(j)  # type: ignore[arg-type]
        return TxEnvelope(
            tx_type=str(j.get("tx_type", "")),
            signer=str(j.get("signer", "")),
            payload=dict(j.get("payload", {}) or {}),
        )
