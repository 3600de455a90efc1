"""Health check endpoints for the Ploi panel.

Both endpoints are mounted at root (no /api/v1 prefix).
"""

import importlib.metadata

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_coordinator
from app.sync.coordinator import ServerListCoordinator

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the application process is running."""
    try:
        version = importlib.metadata.version("ploi-panel")
    except importlib.metadata.PackageNotFoundError:
        version = "unknown"
    return {"status": "ok", "version": version}


@router.get("/health/ready")
async def health_ready(  # type: ignore[return]
    session: AsyncSession = Depends(get_db),
    coordinator: ServerListCoordinator = Depends(get_coordinator),
):
    """Readiness probe: 200 if the cache DB is reachable, 503 otherwise."""
    try:
        await session.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "detail": str(exc)},
        )
    return JSONResponse(
        status_code=200,
        content={"status": "ok", "servers": coordinator.state.value},
    )
