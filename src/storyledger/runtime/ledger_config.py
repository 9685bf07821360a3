# src/storyledger/runtime/ledger_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


@dataclass(frozen=True)
class LedgerConfig:
    ledger_id: str
    mode: str  # "dev" | "test" | "prod"

    # The single platform-level principal allowed to seal stories and close votes.
    admin_principal: str

    db_path: str
    persist: bool

    api_host: str
    api_port: int

    log_level: str


_ALLOWED_MODES = {"dev", "test", "prod"}


def validate_ledger_config(cfg: LedgerConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.ledger_id, str) or not cfg.ledger_id.strip():
        raise ValueError("ledger_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if not isinstance(cfg.admin_principal, str) or not cfg.admin_principal.strip():
        raise ValueError("admin_principal must be a non-empty string")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    if cfg.persist and (not isinstance(cfg.db_path, str) or not cfg.db_path.strip()):
        raise ValueError("db_path must be a non-empty string when persist is enabled")


def default_ledger_config() -> LedgerConfig:
    return LedgerConfig(
        ledger_id="storyledger-dev",
        mode="prod",
        admin_principal="contract-owner",
        db_path="./data/storyledger.db",
        persist=False,
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
    )


def read_ledger_config_file(path: str) -> LedgerConfig:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("ledger config must be a JSON object")

    d = default_ledger_config()
    return LedgerConfig(
        ledger_id=_as_str(raw.get("ledger_id"), d.ledger_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        admin_principal=_as_str(raw.get("admin_principal"), d.admin_principal).strip(),
        db_path=_as_str(raw.get("db_path"), d.db_path),
        persist=_as_bool(raw.get("persist"), d.persist),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level).strip().upper(),
    )


def _apply_env_overrides(cfg: LedgerConfig) -> LedgerConfig:
    env = os.environ
    return replace(
        cfg,
        ledger_id=_as_str(env.get("STORYLEDGER_LEDGER_ID"), cfg.ledger_id),
        mode=_as_str(env.get("STORYLEDGER_MODE"), cfg.mode).strip().lower(),
        admin_principal=_as_str(env.get("STORYLEDGER_ADMIN_PRINCIPAL"), cfg.admin_principal).strip(),
        db_path=_as_str(env.get("STORYLEDGER_DB_PATH"), cfg.db_path),
        persist=_as_bool(env.get("STORYLEDGER_PERSIST"), cfg.persist),
        api_host=_as_str(env.get("STORYLEDGER_API_HOST"), cfg.api_host),
        api_port=_as_int(env.get("STORYLEDGER_API_PORT"), cfg.api_port),
        log_level=_as_str(env.get("STORYLEDGER_LOG_LEVEL"), cfg.log_level).strip().upper(),
    )


def load_ledger_config(*, config_path: Optional[str] = None) -> LedgerConfig:
    """Load config from a JSON file (if any), then STORYLEDGER_* env overrides."""
    p = config_path or os.environ.get("STORYLEDGER_CONFIG_PATH")
    cfg = read_ledger_config_file(p) if p else default_ledger_config()
    cfg = _apply_env_overrides(cfg)
    validate_ledger_config(cfg)
    return cfg
