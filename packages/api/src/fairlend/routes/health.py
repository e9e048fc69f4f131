"""Liveness and readiness probes."""

from fairlend_db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .. import __version__

router = APIRouter()


@router.get("/")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}


@router.get("/ready")
async def ready(db: DatabaseService = Depends(get_db_service)) -> JSONResponse:
    """Report whether the database is reachable."""
    if await db.health_check():
        return JSONResponse(status_code=200, content={"status": "ready", "database": "ok"})
    return JSONResponse(
        status_code=503, content={"status": "unavailable", "database": "unreachable"}
    )
