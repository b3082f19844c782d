"""
SkateSpots Backend - Liveness & Health Routes
===============================================

What:  GET /api/test answers without touching any dependency.
       GET /health additionally probes the database.
Who:   The frontend's connectivity check, Docker health checks, monitoring.

Status levels for /health:
    - healthy:   database reachable
    - unhealthy: database missing or unreachable (still HTTP 200, the
                 process itself is up)
"""

import logging
import time

from fastapi import APIRouter

from skatespots import __version__
from skatespots.schemas.spot import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/api/test",
    response_model=MessageResponse,
    summary="Liveness message",
)
async def liveness() -> MessageResponse:
    return MessageResponse(message="Server is running!")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """Runs SELECT 1 against the spot database and reports uptime."""
    from skatespots.database import check_connection

    connected = await check_connection()
    if not connected:
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
