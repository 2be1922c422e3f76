from __future__ import annotations

import logging
from typing import Any, Dict, Optional, cast

from fastapi import Request
from fastapi import HTTPException as FastAPIHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from ...engine.board import IllegalMoveError


logger = logging.getLogger(__name__)


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: Optional[list[dict[str, str]]] = None,
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    if reason:
        payload["error"]["reason"] = reason
    return payload


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _render_http_exception(request: Request, exc: FastAPIHTTPException) -> JSONResponse:
    status_code = exc.status_code
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _render_http_exception(request, cast(FastAPIHTTPException, exc))


async def illegal_move_handler(request: Request, exc: Exception) -> JSONResponse:
    err = cast(IllegalMoveError, exc)
    payload = error_envelope(
        code="illegal_move",
        message=str(err),
        err_type="client_error",
        request_id=_request_id(request),
        reason=err.reason.name.lower(),
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        return _render_http_exception(request, exc)
    request_id = _request_id(request)
    logger.exception("Unhandled exception", extra={"request_id": request_id})
    payload = error_envelope(
        code="internal_error",
        message="Internal Server Error",
        err_type="server_error",
        request_id=request_id,
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    # Map Pydantic/FastAPI validation errors to our structured envelope with 422
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        errors.append(
            {
                "field": loc,
                "code": e.get("type", "value_error"),
                "message": e.get("msg", "invalid value"),
            }
        )
    payload = error_envelope(
        code="unprocessable_entity",
        message="Validation error",
        err_type="client_error",
        request_id=_request_id(request),
        field_errors=errors or None,
    )
    return JSONResponse(status_code=422, content=payload)


def _status_to_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "bad_request"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if status_code == 422:
        return "unprocessable_entity"
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
