"""Progress and analytics views over the caller's logs and game sessions."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.analysis.dependencies import get_orchestrator
from cogdash.analysis.orchestrator import AggregationOrchestrator
from cogdash.analysis.schemas import DomainAnalysisResponse
from cogdash.auth.dependencies import CurrentUser, get_current_user
from cogdash.database import get_session
from cogdash.games.schemas import GameSessionResponse
from cogdash.progress.service import (
    ANALYTICS_SESSION_LIMIT,
    PROGRESS_SESSION_LIMIT,
    performance_metrics,
    recent_logs,
    recent_sessions,
)

router = APIRouter(prefix="/api", tags=["Progress"])


class AnalyticsResponse(BaseModel):
    success: bool = True
    performance_metrics: list[dict[str, Any]]
    recent_sessions: list[GameSessionResponse]


class ProgressResponse(BaseModel):
    success: bool = True
    logs: dict[str, list[dict[str, Any]]]
    recent_sessions: list[GameSessionResponse]
    domain_performance: DomainAnalysisResponse


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AnalyticsResponse:
    """Per-game-type metrics plus the most recent sessions."""
    metrics = await performance_metrics(db, current_user.id)
    sessions = await recent_sessions(db, current_user.id, ANALYTICS_SESSION_LIMIT)
    return AnalyticsResponse(
        performance_metrics=metrics,
        recent_sessions=[GameSessionResponse.model_validate(s) for s in sessions],
    )


@router.get("/progress", response_model=ProgressResponse)
async def progress(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> ProgressResponse:
    """Recent personal logs, recent sessions and cached domain summaries."""
    logs = await recent_logs(db, current_user.id)
    sessions = await recent_sessions(db, current_user.id, PROGRESS_SESSION_LIMIT)
    run = await orchestrator.read_summaries(current_user.id)
    return ProgressResponse(
        logs=logs,
        recent_sessions=[GameSessionResponse.model_validate(s) for s in sessions],
        domain_performance=DomainAnalysisResponse.from_run(run),
    )
