"""Service Status — liveness and readiness of the transfer API.

Invariants:
    - GET /health/ answers 200 whenever the worker can serve a request
    - GET /health/ready answers 503 until the record store answers a ping
    - Neither endpoint needs actor headers

Design Decisions:
    - Readiness also reports migrations running in this worker, so a deploy
      can wait for them before draining it
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from arsip.config import get_settings
from arsip.infrastructure import database
from arsip.services.migration_executor import in_flight_count

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": settings.service_version,
    }


@router.get("/ready")
async def readiness():
    """Record store reachable? Reports running migrations either way."""
    manager = database.db_manager
    store_ok = manager is not None and await manager.health_check()
    body = {
        "checks": {"database": "healthy" if store_ok else "unavailable"},
        "migrations_in_flight": in_flight_count(),
    }
    if not store_ok:
        logger.warning("Readiness check failed: record store unavailable")
        return JSONResponse(status_code=503, content={"status": "not_ready", **body})
    return {"status": "ready", **body}
