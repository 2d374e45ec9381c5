"""Analysis API request/response schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from cogdash.analysis.engine import DomainSummary
from cogdash.analysis.orchestrator import AggregationRun, OutcomeStatus


class DomainPerformanceResponse(BaseModel):
    """One stored domain summary."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    domain: str
    period_start: date
    period_end: date
    total_sessions: int
    average_score: float
    median_score: float
    best_score: float
    score_stddev: float
    average_accuracy: float | None
    total_playtime_seconds: int
    last_played: datetime | None
    last_updated: datetime

    @classmethod
    def from_summary(cls, summary: DomainSummary | None) -> DomainPerformanceResponse | None:
        if summary is None:
            return None
        return cls.model_validate(summary)


class ComputeUserRequest(BaseModel):
    """Body of POST /analysis/compute-user."""

    user_id: str | None = Field(None, min_length=1, max_length=64)
    period_start: date | None = None
    period_end: date | None = None


class DomainAnalysisResponse(BaseModel):
    """Per-domain summaries for one user and window.

    ``domains`` holds null for a domain whose summary is absent or failed;
    ``statuses`` tells the two apart.
    """

    success: bool = True
    user_id: str
    period_start: date
    period_end: date
    domains: dict[str, DomainPerformanceResponse | None]
    statuses: dict[str, OutcomeStatus]
    errors: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_run(cls, run: AggregationRun) -> DomainAnalysisResponse:
        return cls(
            user_id=run.user_id,
            period_start=run.period_start,
            period_end=run.period_end,
            domains={
                domain: DomainPerformanceResponse.from_summary(summary)
                for domain, summary in run.domains().items()
            },
            statuses=run.statuses(),
            errors=run.errors(),
        )


class DomainInfoResponse(BaseModel):
    key: str
    name: str
    description: str
    color: str
