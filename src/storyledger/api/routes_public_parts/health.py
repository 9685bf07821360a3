from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()


def _now_ms() -> int:
    return int(time.time() * 1000)


def _health_payload(request: Request) -> Dict[str, Any]:
    """Liveness. Never raises; reports what it can about the ledger."""
    ex = getattr(request.app.state, "executor", None)
    out: Dict[str, Any] = {
        "ok": True,
        "service": "storyledger",
        "version": "v1",
        "ts_ms": _now_ms(),
        "executor": ex is not None,
    }
    if ex is not None:
        st = ex.read_state()
        out["ledger_id"] = str(st.params.get("ledger_id") or "") or None
        out["stories"] = len(st.stories)
        out["last_story_id"] = int(st.last_story_id)
        out["last_decision_id"] = int(st.last_decision_id)
    return out


@router.get("/v1/health")
def v1_health(request: Request) -> Dict[str, Any]:
    return _health_payload(request)


@router.get("/healthz")
def healthz(request: Request) -> Dict[str, Any]:
    # Kubernetes-style alias
    return _health_payload(request)


@router.get("/readyz")
def readyz(request: Request) -> Dict[str, Any]:
    """Readiness: an executor is attached and an admin principal is configured."""
    ex = getattr(request.app.state, "executor", None)
    admin = ex.read_state().get_admin_principal() if ex is not None else ""
    return {
        "ok": bool(ex is not None and admin),
        "service": "storyledger",
        "version": "v1",
        "ts_ms": _now_ms(),
        "admin_configured": bool(admin),
    }
