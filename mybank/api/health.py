"""
mybank/api/health.py

Purpose: Health, readiness and liveness probes

These do not touch the request counter.
"""

import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from mybank.api.dependencies import get_app_settings, get_session_manager
from mybank.core.config import Settings
from mybank.db.mongo import MongoSessionManager

router = APIRouter()


@router.get("/health", tags=["Health"])
async def health_check(
    settings: Settings = Depends(get_app_settings),
    sessions: MongoSessionManager = Depends(get_session_manager),
):
    """
    Reports database connectivity and session pool usage.
    """
    db_healthy = await sessions.check_health()

    health_status = {
        "status": "healthy" if db_healthy else "degraded",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
            "sessions_in_use": sessions.in_use,
        },
    }

    status_code = 200 if db_healthy else 503
    return JSONResponse(content=health_status, status_code=status_code)


@router.get("/ready", tags=["Health"])
async def readiness_check(sessions: MongoSessionManager = Depends(get_session_manager)):
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    if await sessions.check_health():
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "database_unavailable"}
    )


@router.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}
