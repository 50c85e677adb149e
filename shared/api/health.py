"""Health check API endpoints."""
from fastapi import APIRouter

from database import get_db_manager

router = APIRouter(tags=["health"])

SERVICE_NAME = "Course Tutor Backend"
SERVICE_VERSION = "1.0.0"


@router.get("/")
def read_root():
    """Liveness probe."""
    return {"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/health/db")
def database_health():
    """Readiness probe: can the tutor database answer a query."""
    if get_db_manager().health_check():
        return {"status": "ok", "database": "connected"}
    return {"status": "error", "database": "connection_failed"}
