"""
Health check router.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.infrastructure.events import RedisNotificationGateway, check_redis_sync_health


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def health_check():
    """Basic liveness check."""
    return {
        "status": "healthy",
        "service": "floor-ops",
        "environment": settings.environment,
    }


@router.get("/detailed")
def detailed_health_check(request: Request, db: Session = Depends(get_db)):
    """
    Verify connectivity to the database and, when events go through Redis,
    to Redis. Returns 503 if any dependency is down.
    """
    checks = {
        "service": "floor-ops",
        "environment": settings.environment,
        "dependencies": {},
    }
    all_healthy = True

    try:
        db.execute(text("SELECT 1"))
        checks["dependencies"]["database"] = {"status": "healthy"}
    except SQLAlchemyError as e:
        checks["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

    notifier = request.app.state.notifier
    if isinstance(notifier, RedisNotificationGateway):
        redis_health = check_redis_sync_health()
        checks["dependencies"]["redis"] = redis_health
        checks["circuit_breaker"] = notifier.circuit_breaker.get_stats()
        if redis_health["status"] != "healthy":
            all_healthy = False

    checks["status"] = "healthy" if all_healthy else "degraded"
    if not all_healthy:
        return JSONResponse(content=checks, status_code=503)
    return checks
