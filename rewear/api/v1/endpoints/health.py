"""
Health checks - for load balancers, Kubernetes, and monitoring.
Liveness is unconditional; readiness pings the database.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from rewear.config import get_settings
from rewear.db.session import DbSession

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


@router.get("")
async def health():
    """Liveness: is the process up?"""
    return {"status": "ok", "app": settings.app_name}


@router.get("/ready")
async def ready(session: DbSession):
    """Readiness: can the database be reached?"""
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("readiness check failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "down"},
        )
    return {"status": "ready", "database": "ok"}
