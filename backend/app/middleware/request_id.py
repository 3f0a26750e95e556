"""
CareNotes Backend: Request ID Middleware
==========================================

What:  Assigns a unique id to each incoming request and adds it to the response.
How:   Uses the client's X-Request-ID when present, otherwise generates a
       UUID4; stores it in a ContextVar and request.state; echoes it in the
       X-Request-ID response header.
When:  Outermost middleware (runs before all other processing).
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local storage for the current request id, read by loggers and
# the request pipeline
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def current_request_id(request: Request) -> str:
    """Request id for `request`, falling back to the ContextVar."""
    return getattr(request.state, "request_id", None) or request_id_var.get("")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Check if client sent X-Request-ID header
        2. If present: use it; if absent: generate a new UUID4
        3. Store in ContextVar and request.state
        4. Add to response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid

        return response
