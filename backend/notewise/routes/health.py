"""
NoteWise Backend - Health Check Route
=====================================

What:  GET /health for monitoring and load balancer health checks.
How:   SELECT 1 against the database, then GeminiService.test_connection().

Status levels:
    healthy:   database and Gemini both answer
    degraded:  database up, Gemini unavailable (notes work, AI does not)
    unhealthy: database down (HTTP 503)

The Gemini check sends one tiny prompt, so each call spends a request
against the API quota. It uses its own GeminiService with a single attempt
and a short deadline: a rate-limited or hung provider reports "unavailable"
at once instead of waiting through backoff.
"""

import logging
import time

from fastapi import APIRouter, Response

from notewise import __version__
from notewise.database import ping_database
from notewise.schemas.note import HealthResponse
from notewise.services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()

HEALTH_CHECK_TIMEOUT = 5.0

health_gemini = GeminiService(max_retries=1, request_timeout=HEALTH_CHECK_TIMEOUT)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    gemini_status = "available"
    overall = "healthy"

    try:
        await ping_database()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # test_connection never raises; it logs its own failure reason.
    if not await health_gemini.test_connection():
        gemini_status = "unavailable"
        if overall == "healthy":
            overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
