# src/storyledger/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from storyledger.api.routes_public_parts.health import router as health_router
from storyledger.api.routes_public_parts.metrics import router as metrics_router
from storyledger.api.routes_public_parts.plot import router as plot_router
from storyledger.api.routes_public_parts.stories import router as stories_router

public_router = APIRouter()

# Health paths are absolute (/v1/health, /healthz, /readyz).
public_router.include_router(health_router, prefix="", tags=["health"])

# Versioned API surface
public_router.include_router(stories_router, prefix="/v1", tags=["stories"])
public_router.include_router(plot_router, prefix="/v1", tags=["plot"])

# Ops
public_router.include_router(metrics_router, prefix="/v1", tags=["metrics"])
