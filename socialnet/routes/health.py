"""
Health check route for load balancers and monitoring.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from .. import __version__
from ..config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

START_TIME = datetime.now(timezone.utc)


@router.get("")
def health_check(request: Request):
    """Liveness plus storage reachability."""
    database_ok = request.app.state.database.ping()
    return {
        "ok": database_ok,
        "status": "healthy" if database_ok else "degraded",
        "environment": get_settings().environment,
        "version": __version__,
        "checks": {"database": "healthy" if database_ok else "unhealthy"},
        "uptime_seconds": round((datetime.now(timezone.utc) - START_TIME).total_seconds()),
    }
