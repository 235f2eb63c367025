# app/middleware/request_logging.py
from __future__ import annotations

import logging
import time
import uuid
from typing import Iterable, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("app.request")

# probes and docs are noise in the access log
QUIET_PREFIXES: Tuple[str, ...] = (
    "/api/healthz",
    "/api/readyz",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
)


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access-log line per request (method, path, status, duration, trace id).
    Every response carries X-Request-ID; inbound X-Request-ID is reused.
    """

    def __init__(self, app, quiet_prefixes: Iterable[str] = QUIET_PREFIXES):
        super().__init__(app)
        self.quiet_prefixes = tuple(quiet_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.trace_id = trace_id

        path = request.url.path
        quiet = request.method == "OPTIONS" or path.startswith(self.quiet_prefixes)
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            # handlers in app.core.errors build the response; record the crash here
            logger.exception(
                "request CRASH %s %s dur_ms=%s trace_id=%s",
                request.method,
                path,
                int((time.perf_counter() - start) * 1000),
                trace_id,
            )
            raise

        response.headers["X-Request-ID"] = trace_id
        if not quiet:
            logger.log(
                _level_for(response.status_code),
                "request %s %s -> %s dur_ms=%s trace_id=%s",
                request.method,
                path,
                response.status_code,
                int((time.perf_counter() - start) * 1000),
                trace_id,
            )
        return response
