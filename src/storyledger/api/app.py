from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from storyledger.api.errors import install_error_handlers
from storyledger.api.routes_public import public_router
from storyledger.api.security import RequestSizeLimitMiddleware
from storyledger.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from storyledger.runtime.executor_boot import build_executor as _build_executor
from storyledger.runtime.ledger_config import LedgerConfig, load_ledger_config


def build_executor(cfg: Optional[LedgerConfig] = None):
    """Build a StoryLedgerExecutor for the API runtime.

    This wrapper exists so tests can monkeypatch `storyledger.api.app.build_executor`
    without reaching into runtime modules.
    """
    return _build_executor(cfg)


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    Config (file + STORYLEDGER_* env) is loaded once and drives docs gating,
    log level and the executor.

    boot_runtime:
      - True (default): attach an executor built from that config
      - False: no executor; tests attach one to app.state themselves
    """
    cfg = load_ledger_config()

    configure_structured_logging(cfg.log_level)

    # Disable docs in production.
    if cfg.mode == "prod":
        app = FastAPI(title="Story Ledger API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="Story Ledger API")

    app.state.cfg = cfg
    app.state.executor = build_executor(cfg) if boot_runtime else None

    install_error_handlers(app)

    # --- Middleware ---
    # Added last runs first: request logging wraps the size limiter.
    app.add_middleware(RequestSizeLimitMiddleware)
    app.add_middleware(RequestLogMiddleware)

    app.include_router(public_router)

    return app
