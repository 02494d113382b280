"""Health Probes — liveness of the process, readiness of the migrated schema.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process serves requests
    - GET /api/v1/health/ready answers 200 only when the database is reachable
      and every schema table exists; otherwise 503 with the failing check
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from taskmanager.config import Settings, get_settings
from taskmanager.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(request: Request):
    return {"status": "healthy", "service": request.app.title, "version": request.app.version}


@router.get("/ready")
async def readiness(settings: Settings = Depends(get_settings)):
    manager = database.db_manager
    missing = await manager.missing_tables() if manager else None
    if missing is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": {"database": "unreachable"}},
        )
    if missing:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "checks": {"database": "healthy", "schema": "missing"},
                "missing_tables": missing,
            },
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy", "schema": "migrated"},
        "storage_base_path": settings.storage_base_path,
    }
