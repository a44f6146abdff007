from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.greenhouse.api.http.deps import get_database_service
from src.greenhouse.core.services import DbSessionService
from src.greenhouse.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "healthy", "environment": get_config().app.environment}


@router.get("/ready")
async def readiness(database_service: DbSessionService = Depends(get_database_service)):
    """Readiness check; verifies the database answers."""
    if await run_in_threadpool(database_service.health_check):
        return {"status": "ready", "database": "ok"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "database": "unavailable"},
    )
