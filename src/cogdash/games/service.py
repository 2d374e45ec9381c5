"""Game session writes and history reads."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.db.models import GameSession
from cogdash.domains import game_domain
from cogdash.errors import StorageFailure
from cogdash.games.schemas import GameSaveRequest

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_session(user_id: str, body: GameSaveRequest, now: datetime | None = None) -> dict[str, Any]:
    """Build the insert values for a session, clamping secondary metrics.

    score >= 0, accuracy in [0, 100], reaction_time >= 0, duration floored
    and >= 0, level floored and >= 1.
    """
    game_type = game_domain(body.game_type)
    if now is None:
        now = datetime.now(timezone.utc)

    return {
        "user_id": user_id,
        "game_type": game_type,
        "game_name": body.game_name or None,
        "score": max(0, round(body.score)),
        "accuracy": max(0.0, min(100.0, body.accuracy)) if body.accuracy is not None else None,
        "reaction_time": max(0.0, body.reaction_time) if body.reaction_time is not None else None,
        "duration": max(0, math.floor(body.duration)) if body.duration is not None else None,
        "level": max(1, math.floor(body.level)) if body.level is not None else None,
        "game_metadata": body.metadata or {},
        "played_at": _as_utc(body.played_at) if body.played_at else now,
    }


async def record_game_session(db: AsyncSession, user_id: str, body: GameSaveRequest) -> GameSession:
    """Append one completed round for ``user_id``."""
    session = GameSession(**normalize_session(user_id, body))
    db.add(session)
    try:
        await db.commit()
        await db.refresh(session)
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageFailure(
            "Failed to save game session",
            table="game_sessions",
            operation="insert",
        ) from e

    logger.info(
        "Saved %s session %s for user %s (score=%d)",
        session.game_type,
        session.id,
        user_id,
        session.score,
    )
    return session


async def get_game_history(
    db: AsyncSession,
    user_id: str,
    game_type: str | None = None,
    limit: int = 50,
) -> list[GameSession]:
    """Get the user's sessions, newest first."""
    query = (
        select(GameSession)
        .where(GameSession.user_id == user_id)
        .order_by(GameSession.played_at.desc())
        .limit(limit)
    )
    if game_type:
        query = query.where(GameSession.game_type == game_domain(game_type))

    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        raise StorageFailure(
            "Failed to fetch game history",
            table="game_sessions",
            operation="select",
        ) from e
    return list(result.scalars().all())
