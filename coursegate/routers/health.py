"""
Health Check Router

Liveness and readiness endpoints for load balancers and monitoring.
"""

import os
import time

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from coursegate.db.config import get_session
from coursegate.utils.settings import settings
from coursegate.utils.timeutils import isoformat, utcnow

router = APIRouter()

# Application start time for uptime calculation
_start_time = time.time()


@router.get("/health", summary="Basic Health Check")
async def health_check():
    """
    Basic health check endpoint

    Returns application status, version and environment information.
    """
    return {
        "status": "healthy",
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "environment": settings.environment,
        "timestamp": isoformat(utcnow()),
        "uptime": time.time() - _start_time,
    }


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check(session: AsyncSession = Depends(get_session)):
    """
    Kubernetes-style readiness probe

    Returns 200 once the database answers, 503 otherwise.
    """
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(
            status_code=503, detail=f"Application not ready: {type(e).__name__}"
        )
    return {"status": "ready", "timestamp": isoformat(utcnow())}


@router.get("/health/live", summary="Liveness Check")
async def liveness_check():
    """
    Kubernetes-style liveness probe
    """
    return {
        "status": "alive",
        "timestamp": isoformat(utcnow()),
        "pid": os.getpid(),
    }
