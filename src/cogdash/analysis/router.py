"""Domain performance analysis API: read cached summaries, trigger recompute."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

import structlog
from fastapi import APIRouter, Depends, Query

from cogdash.analysis.dependencies import get_orchestrator
from cogdash.analysis.orchestrator import AggregationOrchestrator
from cogdash.analysis.schemas import ComputeUserRequest, DomainAnalysisResponse, DomainInfoResponse
from cogdash.auth.dependencies import CurrentUser, ensure_same_user, get_current_user
from cogdash.domains import DOMAINS, domain_info

logger = structlog.get_logger()

router = APIRouter(prefix="/analysis", tags=["Analysis"])


@router.get("/domains", response_model=list[DomainInfoResponse])
async def list_domains() -> list[DomainInfoResponse]:
    """The measured cognitive domains with display metadata."""
    return [DomainInfoResponse(key=d, **asdict(domain_info(d))) for d in DOMAINS]


@router.get("/domains/{user_id}", response_model=DomainAnalysisResponse)
async def get_domain_performance(
    user_id: str,
    period_start: date | None = Query(None),
    period_end: date | None = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> DomainAnalysisResponse:
    """Get stored summaries for the exact window; null where none was computed."""
    ensure_same_user(current_user, user_id, action="view")
    run = await orchestrator.read_summaries(user_id, period_start, period_end)
    return DomainAnalysisResponse.from_run(run)


@router.post("/compute-user", response_model=DomainAnalysisResponse)
async def compute_user(
    body: ComputeUserRequest,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> DomainAnalysisResponse:
    """Recompute every domain summary for the caller's window."""
    user_id = body.user_id if body.user_id and body.user_id != "current" else current_user.id
    ensure_same_user(current_user, user_id, action="compute")

    logger.info(
        "compute_user_requested",
        user_id=user_id,
        period_start=body.period_start.isoformat() if body.period_start else None,
        period_end=body.period_end.isoformat() if body.period_end else None,
    )
    run = await orchestrator.compute_for_user(user_id, body.period_start, body.period_end)
    return DomainAnalysisResponse.from_run(run)
