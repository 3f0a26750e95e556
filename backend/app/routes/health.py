"""
CareNotes Backend: Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports the result.
       Always answers 200; `status` is "ok" or "degraded".

/health is outside /api: no API key, no rate limit, no access log line.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app import __version__
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    overall = "ok"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "degraded"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database=db_status,
    )
