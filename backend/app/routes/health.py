"""
NoteMap Backend: Health Check Route
====================================

GET /health for container and load balancer probes.

Status levels:
    healthy    database reachable, vision provider reachable, Maps key set
    degraded   database reachable but a provider is unavailable or unconfigured
    unhealthy  database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__, database
from app.config import settings
from app.schemas.common import HealthResponse
from app.services.gemini_service import gemini_transcriber

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not settings.gemini_api_key:
        vision_status = "unconfigured"
    elif await gemini_transcriber.health_check():
        vision_status = "available"
    else:
        vision_status = "unavailable"

    maps_status = "configured" if settings.google_maps_api_key else "unconfigured"

    if overall == "healthy" and (vision_status != "available" or maps_status != "configured"):
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        vision=vision_status,
        maps=maps_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
