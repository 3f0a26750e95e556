"""
CareNotes Backend: API Key Middleware
=======================================

What:  Requires a static shared secret in the `x-api-key` header on /api routes.
How:   Constant-time comparison against Settings.api_key. Missing or wrong
       keys get 401 before any route or database work runs.
When:  After rate limiting, so repeated bad-key attempts are still throttled.

Only /api paths are protected; /health and the docs stay public.
"""

import hmac
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.exceptions import UnauthorizedError
from app.middleware.request_id import current_request_id

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
PROTECTED_PREFIX = "/api"


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Rejects /api requests whose x-api-key does not match the configured key.

    Response on failure:
        HTTP 401 {"error": "unauthorized", "message": "Invalid API key", "request_id": ...}
    """

    def __init__(self, app, api_key: str, **kwargs):
        super().__init__(app, **kwargs)
        self.api_key = api_key

    def _is_valid(self, candidate: str) -> bool:
        if not candidate or not self.api_key:
            return False
        return hmac.compare_digest(candidate.encode(), self.api_key.encode())

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(PROTECTED_PREFIX):
            return await call_next(request)

        if self._is_valid(request.headers.get(API_KEY_HEADER, "")):
            return await call_next(request)

        rid = current_request_id(request)
        client_ip = request.client.host if request.client else "unknown"
        logger.warning("[%s] Invalid API key attempt from %s", rid, client_ip)

        exc = UnauthorizedError()
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "request_id": rid,
            },
        )
