"""Read-only queries behind the progress and analytics views."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from cogdash.db.models import GameSession, PerformanceMetrics
from cogdash.errors import StorageFailure
from cogdash.records.registry import LOG_TABLES, TABLES

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

PROGRESS_LOG_LIMIT = 30
PROGRESS_SESSION_LIMIT = 30
ANALYTICS_SESSION_LIMIT = 100


async def _scalars(db: AsyncSession, query: Any, table: str) -> list[Any]:  # noqa: ANN401
    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        raise StorageFailure(f"Failed to fetch {table}", table=table, operation="select") from e
    return list(result.scalars().all())


async def recent_sessions(db: AsyncSession, user_id: str, limit: int) -> list[GameSession]:
    query = (
        select(GameSession)
        .where(GameSession.user_id == user_id)
        .order_by(GameSession.played_at.desc())
        .limit(limit)
    )
    return await _scalars(db, query, "game_sessions")


async def recent_logs(
    db: AsyncSession,
    user_id: str,
    limit: int = PROGRESS_LOG_LIMIT,
) -> dict[str, list[dict[str, Any]]]:
    """Last ``limit`` rows of every personal log table, newest date first."""
    logs: dict[str, list[dict[str, Any]]] = {}
    for name in LOG_TABLES:
        schema = TABLES[name]
        model = schema.model
        query = (
            select(model)
            .where(model.user_id == user_id)
            .order_by(model.date.desc(), model.created_at.desc())
            .limit(limit)
        )
        logs[name] = [schema.to_dict(row) for row in await _scalars(db, query, name)]
    return logs


async def performance_metrics(db: AsyncSession, user_id: str) -> list[dict[str, Any]]:
    query = (
        select(PerformanceMetrics)
        .where(PerformanceMetrics.user_id == user_id)
        .order_by(PerformanceMetrics.game_type)
    )
    schema = TABLES["performance_metrics"]
    return [schema.to_dict(row) for row in await _scalars(db, query, "performance_metrics")]
