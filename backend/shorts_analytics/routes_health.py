from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.db import get_session
from shorts_analytics.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])
SessionDep = Depends(get_session)


@router.get("/ping")
async def ping():
    return {"status": "ok"}


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": get_settings().environment,
    }


@router.get("/api/health/db")
async def database_health(session: AsyncSession = SessionDep):
    try:
        await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error(f"[health] DB connection test failed: {exc}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "DB connection test failed", "error": str(exc)},
        )
    return {
        "success": True,
        "message": "Connection to DB successful",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
