from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storyledger.runtime import errors as ledger_errors
from storyledger.runtime.tx_types import TxResult

_STATUS_BY_CODE: Dict[str, int] = {
    ledger_errors.NOT_FOUND: 404,
    ledger_errors.STORY_COMPLETE: 409,
    ledger_errors.DECISION_CLOSED: 409,
    ledger_errors.INVALID_OPTION: 400,
    ledger_errors.INVALID_PAYLOAD: 400,
    ledger_errors.INVALID_TX: 400,
    ledger_errors.UNAUTHORIZED: 403,
    ledger_errors.STORAGE_ERROR: 503,
}


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def conflict(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(409, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_tx_result(res: TxResult) -> "ApiError":
        status = _STATUS_BY_CODE.get(res.code, 500)
        return ApiError(status, res.code, res.reason, dict(res.details or {}))

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content={
                "ok": False,
                "error": {"code": self.code, "message": self.message, "details": self.details},
            },
        )


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(_request: Request, exc: ApiError) -> JSONResponse:
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = [".".join(str(p) for p in e.get("loc", ())) for e in exc.errors()]
        return ApiError.bad_request(
            ledger_errors.INVALID_PAYLOAD, "request body failed validation", {"fields": fields}
        ).to_response()
