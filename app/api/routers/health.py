"""
Health check endpoints for monitoring and orchestration (K8s, Docker, etc.)

- /health, /health/live: liveness (always 200)
- /health/db: database connectivity
- /health/ready: cache backend, configured suppliers and, in SQL mode, the database
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_cache, get_registry, get_session
from app.api.deps import get_db_session
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.circuit_breaker import get_supplier_breaker
from app.infrastructure.gateways.registry import SupplierRegistry

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "hotel-inventory-api"


@router.get("/health")
async def health_check():
    """
    Basic liveness probe.

    Returns 200 OK if the application is running.
    """
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    """
    Database connectivity health check.

    Returns 503 Service Unavailable if the database is down.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        return {"status": "healthy", "component": "database"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed", exc_info=e)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "component": "database",
                "error": "Database connection failed",
            },
        )


@router.get("/health/ready")
async def health_check_ready(
    cache: SharedCache = Depends(get_cache),
    registry: SupplierRegistry = Depends(get_registry),
    session: AsyncSession | None = Depends(get_session),
):
    """
    Readiness probe.

    Reports which cache backend is active and which suppliers are
    configured, with the state of each remote supplier's circuit. Only a
    failing database makes the service not ready: suppliers degrade to the
    local inventory on their own.
    """
    suppliers = {}
    for adapter in registry.configured_adapters():
        if adapter.code == registry.local.code:
            suppliers[adapter.code] = "available"
        else:
            suppliers[adapter.code] = get_supplier_breaker(adapter.code).current_state

    health_status = {
        "status": "ready",
        "checks": {
            "cache": cache.backend_name(),
            "suppliers": suppliers,
        },
    }

    if session is None:
        health_status["checks"]["database"] = "in-memory"
        return health_status

    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        health_status["checks"]["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.error("Readiness check: Database unhealthy", exc_info=e)
        health_status["status"] = "not_ready"
        health_status["checks"]["database"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@router.get("/health/live")
async def health_check_live():
    """Alias for /health for orchestrators that prefer the /live naming."""
    return {"status": "ok", "service": SERVICE_NAME}
