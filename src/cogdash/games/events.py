"""Typed events emitted by a game view when a round ends.

A running game never calls the save API itself: its view emits a
``RoundCompleted`` event and the listener owned by that view forwards it to
the session-write path.
"""

from __future__ import annotations

import statistics
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from pydantic import BaseModel, Field, FiniteFloat

from cogdash.db.models import GameSession
from cogdash.games.schemas import INT4_MAX, GameSaveRequest

logger = structlog.get_logger()

SessionWriter = Callable[[str, GameSaveRequest], Awaitable[GameSession]]


class RoundCompleted(BaseModel):
    """One finished round as reported by the game engine."""

    score: FiniteFloat = Field(..., strict=True, le=INT4_MAX)
    accuracy: FiniteFloat | None = None
    # Engines report either a single mean or every reaction time of the round
    reaction_time: FiniteFloat | list[FiniteFloat] | None = None
    duration: FiniteFloat | None = Field(None, le=INT4_MAX)
    level: FiniteFloat | None = Field(None, le=INT4_MAX)
    metadata: dict[str, Any] | None = None

    def mean_reaction_time(self) -> float | None:
        if isinstance(self.reaction_time, list):
            return statistics.fmean(self.reaction_time) if self.reaction_time else None
        return self.reaction_time

    def to_save_request(self, game_type: str, game_name: str | None) -> GameSaveRequest:
        return GameSaveRequest(
            game_type=game_type,
            game_name=game_name,
            score=self.score,
            accuracy=self.accuracy,
            reaction_time=self.mean_reaction_time(),
            duration=self.duration,
            level=self.level,
            metadata=self.metadata,
        )


class RoundListener:
    """Forwards one play view's rounds to the session writer.

    Bound to a single user and game for the lifetime of the view.
    """

    def __init__(
        self,
        user_id: str,
        game_type: str,
        game_name: str | None,
        writer: SessionWriter,
    ) -> None:
        self.user_id = user_id
        self.game_type = game_type
        self.game_name = game_name
        self._writer = writer
        self.rounds_saved = 0

    async def on_round_completed(self, event: RoundCompleted) -> GameSession:
        session = await self._writer(self.user_id, event.to_save_request(self.game_type, self.game_name))
        self.rounds_saved += 1
        logger.debug(
            "round_forwarded",
            user_id=self.user_id,
            game_type=self.game_type,
            session_id=str(session.id),
        )
        return session
