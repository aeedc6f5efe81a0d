"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the storage root is not writable (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from storefront.api.dependencies import get_services
from storefront.services.container import Services

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "storefront-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(services: Services = Depends(get_services)):
    """Readiness probe — includes storage writability."""
    storage_ok = await services.store.health_check()
    if not storage_ok:
        logger.warning("Storage not ready", extra={"path": str(services.store.root)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "storage_unavailable",
            },
        )
    return {"status": "ready", "checks": {"storage": "healthy"}}
