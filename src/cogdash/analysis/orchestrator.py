"""Aggregation orchestrator.

Ties session retrieval, statistics and summary persistence together for one
user and window. Each domain is an independent unit of work: a failure in
one domain is logged and recorded for that domain only, and summaries
already committed for other domains stay committed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Protocol

import structlog

from cogdash.analysis.engine import DomainSummary, SessionLike, compute
from cogdash.analysis.window import DEFAULT_WINDOW_DAYS, resolve_period
from cogdash.domains import DOMAINS
from cogdash.errors import AppError

logger = structlog.get_logger()


class SessionSource(Protocol):
    async def fetch_window(
        self, user_id: str, domain: str, period_start: date, period_end: date
    ) -> Sequence[SessionLike]: ...


class SummaryStore(Protocol):
    async def get(
        self, user_id: str, domain: str, period_start: date, period_end: date
    ) -> DomainSummary | None: ...

    async def upsert(self, summary: DomainSummary) -> DomainSummary: ...


class OutcomeStatus(str, Enum):
    """Per-domain result state.

    ``ok``: summary with at least one session. ``empty``: summary computed
    (or stored) with zero sessions. ``absent``: never computed for this exact
    window (reads only). ``failed``: storage error, no summary.
    """

    OK = "ok"
    EMPTY = "empty"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True)
class DomainOutcome:
    domain: str
    status: OutcomeStatus
    summary: DomainSummary | None = None
    error: str | None = None

    @classmethod
    def from_summary(cls, domain: str, summary: DomainSummary | None) -> DomainOutcome:
        if summary is None:
            return cls(domain=domain, status=OutcomeStatus.ABSENT)
        status = OutcomeStatus.EMPTY if summary.is_empty else OutcomeStatus.OK
        return cls(domain=domain, status=status, summary=summary)


@dataclass
class AggregationRun:
    """Outcomes for every domain of one user and window."""

    user_id: str
    period_start: date
    period_end: date
    outcomes: dict[str, DomainOutcome] = field(default_factory=dict)

    def domains(self) -> dict[str, DomainSummary | None]:
        """Map every domain to its summary, or None when failed or absent."""
        return {domain: self.outcomes[domain].summary for domain in DOMAINS}

    def statuses(self) -> dict[str, OutcomeStatus]:
        return {domain: self.outcomes[domain].status for domain in DOMAINS}

    def errors(self) -> dict[str, str]:
        return {
            domain: outcome.error
            for domain, outcome in self.outcomes.items()
            if outcome.error is not None
        }


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _public_error(exc: Exception) -> str:
    """Error text safe to return to callers. Raw driver messages stay in the logs."""
    return exc.message if isinstance(exc, AppError) else "Storage failure"


class AggregationOrchestrator:
    """Computes and persists domain summaries. Holds no cross-call state."""

    def __init__(
        self,
        store: SessionSource,
        repository: SummaryStore,
        clock: Callable[[], datetime] = _utc_now,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        self._store = store
        self._repository = repository
        self._clock = clock
        self._window_days = window_days

    def _resolve(self, period_start: date | None, period_end: date | None) -> tuple[date, date]:
        return resolve_period(
            period_start,
            period_end,
            today=self._clock().date(),
            window_days=self._window_days,
        )

    async def compute_for_user(
        self,
        user_id: str,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> AggregationRun:
        """Recompute and upsert the summary of every domain for the window."""
        start, end = self._resolve(period_start, period_end)
        run = AggregationRun(user_id=user_id, period_start=start, period_end=end)

        for domain in DOMAINS:
            run.outcomes[domain] = await self._compute_domain(user_id, domain, start, end)

        logger.info(
            "domain_aggregation_complete",
            user_id=user_id,
            period_start=start.isoformat(),
            period_end=end.isoformat(),
            statuses={d: s.value for d, s in run.statuses().items()},
        )
        return run

    async def _compute_domain(
        self, user_id: str, domain: str, start: date, end: date
    ) -> DomainOutcome:
        operation = "fetch_window"
        try:
            sessions = await self._store.fetch_window(user_id, domain, start, end)
            operation = "compute"
            summary = compute(
                sessions,
                start,
                end,
                user_id=user_id,
                domain=domain,
                computed_at=self._clock(),
            )
            operation = "upsert"
            stored = await self._repository.upsert(summary)
        except Exception as exc:
            logger.warning(
                "domain_aggregation_failed",
                user_id=user_id,
                domain=domain,
                operation=operation,
                error=str(exc),
                exc_info=exc,
            )
            return DomainOutcome(domain=domain, status=OutcomeStatus.FAILED, error=_public_error(exc))

        return DomainOutcome.from_summary(domain, stored)

    async def read_summaries(
        self,
        user_id: str,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> AggregationRun:
        """Look up stored summaries for the exact window. Never computes."""
        start, end = self._resolve(period_start, period_end)
        run = AggregationRun(user_id=user_id, period_start=start, period_end=end)

        for domain in DOMAINS:
            try:
                summary = await self._repository.get(user_id, domain, start, end)
            except Exception as exc:
                logger.warning(
                    "domain_summary_read_failed",
                    user_id=user_id,
                    domain=domain,
                    operation="get",
                    error=str(exc),
                    exc_info=exc,
                )
                run.outcomes[domain] = DomainOutcome(
                    domain=domain, status=OutcomeStatus.FAILED, error=_public_error(exc)
                )
                continue
            run.outcomes[domain] = DomainOutcome.from_summary(domain, summary)

        if all(outcome.summary is None for outcome in run.outcomes.values()):
            logger.info(
                "domain_summaries_not_computed",
                user_id=user_id,
                period_start=start.isoformat(),
                period_end=end.isoformat(),
            )
        return run
