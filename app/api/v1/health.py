"""
Health check endpoints untuk API v1.
Menyediakan status aplikasi dan dependency checks.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import redis.asyncio as redis
from redis.exceptions import RedisError

from app.api.dependencies.database import get_db, get_redis
from app.core.config import settings
from app.db.session import check_database_health
from app.schemas.response import HealthCheckResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        service=settings.APP_NAME
    )


@router.get("/ready", response_model=Dict[str, Any])
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis)
) -> Dict[str, Any]:
    """
    Readiness check dengan dependency validation.
    Checks database dan Redis connectivity.

    Args:
        db: Database session
        redis_client: Redis connection

    Returns:
        Detailed readiness status
    """
    checks = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "checks": {
            "database": False,
            "redis": False
        },
        "details": {}
    }

    database = await check_database_health(db)
    checks["checks"]["database"] = database["connected"]
    checks["details"]["database"] = database

    try:
        await redis_client.ping()
        checks["checks"]["redis"] = True
        checks["details"]["redis"] = "Connected"
    except (RedisError, OSError) as e:
        checks["details"]["redis"] = f"Error: {str(e)}"

    if not all(checks["checks"].values()):
        checks["status"] = "unhealthy"

    return checks


@router.get("/live", status_code=status.HTTP_204_NO_CONTENT)
async def liveness_check() -> None:
    """
    Liveness check untuk Kubernetes.
    Return 204 jika service alive.
    """
    return None
