"""Liveness, readiness and version endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.config import get_settings
from cogdash.database import get_session
from cogdash.redis_client import get_redis

logger = structlog.get_logger()

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("readiness_database_failed", error=str(exc))
        return "error"
    return "ok"


async def _check_redis() -> str:
    try:
        await get_redis().ping()
    except (RuntimeError, RedisError) as exc:
        logger.warning("readiness_redis_failed", error=str(exc))
        return "error"
    return "ok"


@router.get("/ready")
async def readiness(
    request: Request,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, Any]:
    """Readiness check. Redis only limits traffic, so it degrades, never blocks."""
    checks = {"database": await _check_database(db), "redis": await _check_redis()}
    all_ok = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if all_ok else "degraded",
        "checks": checks,
        "play_instances": request.app.state.play_arena.instance_count,
    }


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
