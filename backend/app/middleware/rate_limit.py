"""
CareNotes Backend: Rate Limiting Middleware
=============================================

What:  Per-client sliding window rate limiter for /api routes.
How:   Tracks request timestamps in memory, keyed by the x-api-key header or,
       when no key is sent, by the client address.
When:  Before API key authentication in the middleware chain.

Algorithm: Sliding Window Log
    1. Each client key gets a list of request timestamps
    2. On each request, remove timestamps older than the window
    3. If remaining count >= limit, reject with 429
    4. Otherwise, add current timestamp and allow through

Response headers on every /api response (IETF RateLimit header fields):
    RateLimit-Limit:      maximum requests per window
    RateLimit-Remaining:  requests left in the current window
    RateLimit-Reset:      seconds until the oldest counted request expires
On rejection the standard Retry-After header is added.

Limits:
    State is per-process. Several uvicorn workers each keep their own window.
"""

import logging
import math
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.auth import API_KEY_HEADER, PROTECTED_PREFIX
from app.middleware.request_id import current_request_id

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (constructor, defaulting to settings):
        max_requests: Max requests per window (default: 100)
        window_seconds: Window duration in seconds (default: 900 = 15 minutes)
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)

    @staticmethod
    def client_key(request: Request) -> str:
        api_key = request.headers.get(API_KEY_HEADER)
        if api_key:
            return f"key:{api_key}"
        host = request.client.host if request.client else "unknown"
        return f"ip:{host}"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(PROTECTED_PREFIX):
            return await call_next(request)

        key = self.client_key(request)
        now = time.time()
        window_start = now - self.window_seconds

        # ── Sliding Window: Clean old entries ─────────────────────────────
        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]
        timestamps = self._requests[key]

        # ── Check rate limit ──────────────────────────────────────────────
        if len(timestamps) >= self.max_requests:
            retry_after = max(1, math.ceil(timestamps[0] + self.window_seconds - now))
            rid = current_request_id(request)

            logger.warning(
                "[%s] Rate limit exceeded for %s: %d requests in %ds window",
                rid,
                key.split(":", 1)[0],
                len(timestamps),
                self.window_seconds,
            )

            exc = RateLimitExceededError(retry_after=retry_after)
            headers = self._limit_headers(remaining=0, reset=retry_after)
            headers["Retry-After"] = str(retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": {"retry_after": exc.retry_after},
                    "request_id": rid,
                },
                headers=headers,
            )

        # ── Record this request ───────────────────────────────────────────
        timestamps.append(now)
        remaining = self.max_requests - len(timestamps)
        reset = max(0, math.ceil(timestamps[0] + self.window_seconds - now))

        # ── Periodic cleanup of inactive clients ──────────────────────────
        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive_clients(window_start)

        response = await call_next(request)
        response.headers.update(self._limit_headers(remaining=remaining, reset=reset))
        return response

    def _limit_headers(self, remaining: int, reset: int) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(max(0, remaining)),
            "RateLimit-Reset": str(reset),
        }

    def _cleanup_inactive_clients(self, window_start: float) -> None:
        """Drop clients with no requests inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate-limit entries", len(inactive))
