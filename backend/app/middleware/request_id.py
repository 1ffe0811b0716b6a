"""
NoteMap Backend: Request ID Middleware
=======================================

Tags every request with a correlation ID and returns it in X-Request-ID.
A client-supplied ID is reused when it looks sane (1-64 chars of
[A-Za-z0-9._-]); anything else is replaced with a fresh short UUID.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"

_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Read by the access log and by every error handler
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _choose_request_id(incoming: str) -> str:
    if incoming and _ACCEPTED_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = _choose_request_id(request.headers.get(HEADER, ""))
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers[HEADER] = rid
        return response
