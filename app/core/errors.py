# app/core/errors.py
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

log = logging.getLogger("app.errors")

# Notification error taxonomy (DispatchResult.code)
NOT_FOUND = "NOT_FOUND"
NO_TRANSPORT = "NO_TRANSPORT"
NO_RECIPIENTS = "NO_RECIPIENTS"
SEND_FAILED = "SEND_FAILED"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class StoreUnavailable(Exception):
    """Datastore call failed; fatal to the current scan/dispatch, not the process."""

    code = STORE_UNAVAILABLE

    def __init__(self, message: str = "Datastore unavailable", *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


# -----------------------------
# Trace / request id helpers
# -----------------------------
def _ensure_trace_id(request: Request) -> str:
    """
    Reuse the middleware's trace_id, then X-Request-ID, else generate one.
    """
    val = getattr(request.state, "trace_id", None)
    if val:
        return str(val)

    inbound = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")
    trace_id = inbound or uuid.uuid4().hex
    request.state.trace_id = trace_id
    return trace_id


def _error_response(
    request: Request,
    status: int,
    typ: str,
    message: str,
    *,
    details: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """{"ok": false, "error": {type, message, status, trace_id[, details]}}"""
    trace_id = _ensure_trace_id(request)
    error: Dict[str, Any] = {"type": typ, "message": message, "status": status, "trace_id": trace_id}
    if details is not None:
        error["details"] = details
    out_headers = dict(headers or {})
    out_headers["X-Request-ID"] = trace_id
    return JSONResponse(status_code=status, headers=out_headers, content={"ok": False, "error": error})


def _http_message(detail: Any) -> str:
    # plain string, or a structured result such as DispatchResult.model_dump()
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict) and detail.get("error"):
        return str(detail["error"])
    return "HTTP error"


# -----------------------------
# Install / register handlers
# -----------------------------
def register_exception_handlers(app: FastAPI) -> None:
    """
    Every failure path answers with the same JSON envelope and an
    X-Request-ID header matching the access log line.
    """

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        code = int(exc.status_code)
        log.log(
            logging.ERROR if code >= 500 else logging.WARNING,
            "HTTP %s on %s %s | trace_id=%s | detail=%r",
            code,
            request.method,
            request.url.path,
            _ensure_trace_id(request),
            exc.detail,
        )
        return _error_response(
            request,
            code,
            "http_error",
            _http_message(exc.detail),
            details=None if isinstance(exc.detail, str) else exc.detail,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_errors(exc.errors())
        log.warning(
            "invalid request %s %s | trace_id=%s | errors=%s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
            errors,
        )
        return _error_response(request, 422, "validation_error", "Validation failed.", details=errors)

    @app.exception_handler(StoreUnavailable)
    async def store_exc_handler(request: Request, exc: StoreUnavailable):
        log.error(
            "datastore unavailable %s %s | trace_id=%s | %s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
            exc.cause or exc,
        )
        return _error_response(request, 503, "store_unavailable", str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        # traceback stays in the server log
        log.exception(
            "unhandled error %s %s | trace_id=%s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
        )
        return _error_response(request, 500, "internal_error", "Internal server error.")


def jsonable_errors(errors: Any) -> Any:
    # pydantic v2 may put exception objects into ctx
    out = []
    for e in errors or []:
        item = dict(e)
        if "ctx" in item:
            item["ctx"] = {k: str(v) for k, v in (item["ctx"] or {}).items()}
        out.append(item)
    return out


@contextmanager
def store_guard(what: str):
    """Re-raise datastore connectivity failures as StoreUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailable(f"Datastore unavailable while {what}", cause=exc) from exc
