"""
SchoolMap Backend - Health Check Route
======================================

What:  Health endpoint for container probes and monitoring.
How:   Runs SELECT 1 against the database and a one-row NEIS query.

Status levels:
    healthy:   database and directory reachable (HTTP 200)
    degraded:  directory unreachable; local features still work (HTTP 200)
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.neis_service import directory_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    directory_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not await directory_service.health_check():
        directory_status = "unavailable"
        if overall == "healthy":
            overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        directory=directory_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
