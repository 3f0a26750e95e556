"""
CareNotes Backend: Request Logging Middleware
===============================================

What:  One access-log line for every HTTP request.
How:   Measures duration around the downstream call and logs method, path,
       status, duration, request id and client address.
When:  After RequestIDMiddleware (uses request ID for correlation), before
       rate limiting and authentication so rejected requests are logged too.

What we log vs what we DON'T log (privacy):
    Log: method, path, status, duration, IP, request ID
    Don't log: request bodies (patient data), the x-api-key header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import current_request_id

logger = logging.getLogger("carenotes.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level by status:
        5xx → ERROR, 4xx → WARNING, otherwise INFO
    /health is skipped (probes run every few seconds).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = current_request_id(request)

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
