"""FastAPI dependencies wiring the aggregation pipeline to a DB session."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.analysis.orchestrator import AggregationOrchestrator, SessionSource, SummaryStore
from cogdash.analysis.repository import DomainSummaryRepository
from cogdash.analysis.session_store import SessionStore
from cogdash.config import get_settings
from cogdash.database import get_session


async def get_session_store(db: AsyncSession = Depends(get_session)) -> SessionSource:
    return SessionStore(db)


async def get_summary_repository(db: AsyncSession = Depends(get_session)) -> SummaryStore:
    return DomainSummaryRepository(db)


async def get_orchestrator(
    store: SessionSource = Depends(get_session_store),
    repository: SummaryStore = Depends(get_summary_repository),
) -> AggregationOrchestrator:
    """Build a per-request orchestrator."""
    settings = get_settings()
    return AggregationOrchestrator(
        store,
        repository,
        window_days=settings.analysis_default_window_days,
    )
