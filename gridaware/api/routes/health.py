"""
Grid Aware – Health Check Endpoints
====================================
  GET /api/v1/health         → liveness (no I/O)
  GET /api/v1/health/ready   → readiness (settings database, disk)
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from gridaware.config import settings
from gridaware.database.session import AsyncSessionFactory

router = APIRouter()

_START = time.time()


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    timestamp: str
    version: str = "1.0.0"
    uptime_s: float = 0.0


class ComponentHealth(BaseModel):
    name: str
    status: str   # ok | degraded | failed
    detail: str = ""
    latency_ms: float = 0.0


async def _check_db() -> ComponentHealth:
    """Ping the options database and measure round-trip latency."""
    t0 = time.perf_counter()
    try:
        async with AsyncSessionFactory() as sess:
            await sess.execute(text("SELECT 1"))
    except Exception as exc:
        return ComponentHealth(name="database", status="failed", detail=str(exc)[:200])
    return ComponentHealth(
        name="database",
        status="ok",
        detail="SQLAlchemy async session OK",
        latency_ms=round((time.perf_counter() - t0) * 1000, 2),
    )


def _check_disk() -> ComponentHealth:
    """Warn if disk is more than 85% full."""
    usage = psutil.disk_usage("/")
    return ComponentHealth(
        name="disk",
        status="ok" if usage.percent < 85 else "degraded",
        detail=f"{usage.free // (1024 ** 3)} GB free ({usage.percent:.1f}% used)",
    )


@router.get("", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_s=round(time.time() - _START, 1),
    )


@router.get("/ready", summary="Readiness probe")
async def readiness_check() -> JSONResponse:
    """Returns 503 if the database is unreachable or the disk check fails."""
    db_health = await _check_db()
    disk_health = _check_disk()

    ready = db_health.status == "ok" and disk_health.status != "failed"
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "ready": ready,
            "database": db_health.model_dump(),
            "disk": disk_health.model_dump(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
