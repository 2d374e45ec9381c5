"""Read-only access to game session records for aggregation."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.analysis.window import window_bounds
from cogdash.db.models import GameSession
from cogdash.errors import StorageFailure

logger = logging.getLogger(__name__)


class SessionStore:
    """Reads a user's sessions for one domain and window."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def fetch_window(
        self,
        user_id: str,
        domain: str,
        period_start: date,
        period_end: date,
    ) -> list[GameSession]:
        """Get every session of ``domain`` played on a day of the window."""
        lower, upper = window_bounds(period_start, period_end)
        try:
            result = await self._db.execute(
                select(GameSession).where(
                    GameSession.user_id == user_id,
                    GameSession.game_type == domain,
                    GameSession.played_at >= lower,
                    GameSession.played_at < upper,
                )
            )
            sessions = list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StorageFailure(
                "Failed to fetch game sessions",
                domain=domain,
                operation="fetch_window",
            ) from e

        logger.debug("Fetched %d %s sessions for user %s", len(sessions), domain, user_id)
        return sessions
