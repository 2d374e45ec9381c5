"""Pydantic schemas for game session API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, FiniteFloat

# Largest value the integer columns of game_sessions can hold
INT4_MAX = 2_147_483_647


class GameSaveRequest(BaseModel):
    """Body of POST /api/game/save. Finite values are clamped; non-finite or oversized numbers are rejected."""

    game_type: str = Field(..., min_length=1)
    game_name: str | None = Field(None, max_length=64)
    score: FiniteFloat = Field(..., strict=True, le=INT4_MAX)
    accuracy: FiniteFloat | None = None
    reaction_time: FiniteFloat | None = None
    duration: FiniteFloat | None = Field(None, le=INT4_MAX)
    level: FiniteFloat | None = Field(None, le=INT4_MAX)
    metadata: dict[str, Any] | None = None
    played_at: datetime | None = None


class GameSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    game_type: str
    game_name: str | None
    score: int
    accuracy: float | None
    reaction_time: float | None
    duration: int | None
    level: int | None
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("game_metadata", "metadata"),
    )
    played_at: datetime


class GameSaveResponse(BaseModel):
    success: bool = True
    data: GameSessionResponse


class GameHistoryResponse(BaseModel):
    success: bool = True
    sessions: list[GameSessionResponse]
