"""Liveness and readiness checks."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from craftshare import __version__
from craftshare.db.connection import get_db
from craftshare.startup_validation import StartupValidationError, validate_database_connection

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Report whether the database answers. Always responds 200."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return {"status": "error", "database": "disconnected", "detail": str(e)}
    return {"status": "ok", "database": "connected", "version": __version__}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """503 until the schema exists and can be queried."""
    try:
        projects = await validate_database_connection(db)
    except StartupValidationError as e:
        return JSONResponse(status_code=503, content={"status": "unavailable", "detail": str(e)})
    return {"status": "ready", "projects": projects}
