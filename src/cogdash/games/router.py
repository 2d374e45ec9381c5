"""Game session API: save completed rounds, list history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.auth.dependencies import CurrentUser, get_current_user
from cogdash.config import get_settings
from cogdash.database import get_session
from cogdash.games.schemas import (
    GameHistoryResponse,
    GameSaveRequest,
    GameSaveResponse,
    GameSessionResponse,
)
from cogdash.games.service import get_game_history, record_game_session

router = APIRouter(prefix="/api/game", tags=["Games"])


@router.post("/save", response_model=GameSaveResponse, status_code=201)
async def save_game(
    body: GameSaveRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> GameSaveResponse:
    """Record a completed game round for the caller."""
    session = await record_game_session(db, current_user.id, body)
    return GameSaveResponse(data=GameSessionResponse.model_validate(session))


@router.get("/history", response_model=GameHistoryResponse)
async def game_history(
    game_type: str | None = Query(None),
    limit: int | None = Query(None, ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> GameHistoryResponse:
    """Get the caller's sessions, newest first (at most history_max_limit)."""
    settings = get_settings()
    sessions = await get_game_history(
        db,
        current_user.id,
        game_type=game_type,
        limit=min(limit or settings.history_default_limit, settings.history_max_limit),
    )
    return GameHistoryResponse(
        sessions=[GameSessionResponse.model_validate(s) for s in sessions],
    )
