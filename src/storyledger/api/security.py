from __future__ import annotations

import os
from typing import Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from storyledger.api.errors import ApiError

PRINCIPAL_HEADER = "x-principal"


def _truthy(v: str | None) -> bool:
    return (v or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except Exception:
        return int(default)


def require_principal(request: Request, *, header: str = PRINCIPAL_HEADER) -> str:
    """Return the caller identity forwarded by the trusted gateway.

    The API never authenticates callers itself; whatever sits in front of it
    must verify identity and set this header. Missing or blank is a 400.
    """
    principal = (request.headers.get(header) or "").strip()
    if not principal:
        raise ApiError.bad_request("missing_principal", f"{header} header is required", {})
    return principal


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Fail-fast request size limiter.

    - Enforces Content-Length when present.
    - Also caps buffered body size for mutating requests.

    Configure:
      STORYLEDGER_MAX_REQUEST_BYTES (default: 65_536)
      STORYLEDGER_SIZE_LIMIT_DISABLE=1 to disable
    """

    def __init__(
        self,
        app,
        *,
        max_bytes: Optional[int] = None,
        exempt_prefixes: Tuple[str, ...] = ("/docs", "/openapi.json", "/health", "/v1/health"),
    ):
        super().__init__(app)
        self._enabled = not _truthy(os.environ.get("STORYLEDGER_SIZE_LIMIT_DISABLE"))
        self._max_bytes = int(max_bytes) if max_bytes is not None else _env_int("STORYLEDGER_MAX_REQUEST_BYTES", 65_536)
        self._exempt_prefixes = exempt_prefixes

    def _too_large(self) -> JSONResponse:
        return ApiError(413, "request_too_large", "Request body too large", {"max_bytes": self._max_bytes}).to_response()

    async def dispatch(self, request: Request, call_next):
        if not self._enabled:
            return await call_next(request)

        path = request.url.path or ""
        for ex in self._exempt_prefixes:
            if path.startswith(ex):
                return await call_next(request)

        cl = request.headers.get("content-length")
        if cl:
            try:
                if int(cl) > self._max_bytes:
                    return self._too_large()
            except ValueError:
                # Malformed header; fall back to the buffered body cap.
                pass

        if (request.method or "").upper() in {"POST", "PUT", "PATCH"}:
            body = await request.body()
            if body and len(body) > self._max_bytes:
                return self._too_large()

        return await call_next(request)
