"""
NoteMap Backend: Access Log Middleware
=======================================

One line per request on the `notemap.access` logger:

    POST /api/geocode 200 84.2ms rid=3f9c1a2b uid=6d1e0f4c ip=10.0.0.7

Severity tracks the response: 5xx ERROR, 4xx WARNING, anything else INFO.
Probe traffic (GET /health) is not logged.

Request bodies and query strings are never logged: both carry street
addresses. The identity is truncated to its first 8 characters.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("notemap.access")

QUIET_PATHS = frozenset({"/health"})


def _severity(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Set by IdentityMiddleware, which runs inside this one
        uid = getattr(request.state, "user_id", None) or "-"
        fields = {
            "request_id": request_id_var.get(""),
            "user_id": uid[:8],
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 1),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            _severity(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms rid=%(request_id)s uid=%(user_id)s ip=%(client_ip)s",
            fields,
            extra=fields,
        )
        return response
