"""Domain performance statistics engine.

Reduces one user's sessions for one domain and window into a
``DomainSummary``. Pure and deterministic: no I/O, no clock reads, and the
result does not depend on the order of the input sessions. Means go through
``math.fsum`` (via ``statistics.fmean``) and the standard deviation through
``statistics.pstdev`` so float rounding cannot vary with input order.
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Protocol


class SessionLike(Protocol):
    """The session fields the engine reads."""

    score: int
    accuracy: float | None
    duration: int | None
    played_at: datetime


@dataclass(frozen=True)
class DomainSummary:
    """Summary statistics for one (user, domain, period_start, period_end) key."""

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

    @property
    def key(self) -> tuple[str, str, date, date]:
        return (self.user_id, self.domain, self.period_start, self.period_end)

    @property
    def is_empty(self) -> bool:
        return self.total_sessions == 0

    def summary_fields(self) -> dict[str, Any]:
        """Column mapping for persistence."""
        return asdict(self)

    def statistics_equal(self, other: DomainSummary) -> bool:
        """Compare every field except ``last_updated``."""
        mine = self.summary_fields()
        theirs = other.summary_fields()
        mine.pop("last_updated")
        theirs.pop("last_updated")
        return mine == theirs


def compute(
    sessions: Sequence[SessionLike],
    period_start: date,
    period_end: date,
    *,
    user_id: str,
    domain: str,
    computed_at: datetime,
) -> DomainSummary:
    """Compute the summary for sessions already filtered to the window.

    An empty input is a valid, confirmed-empty summary: counts and score
    statistics are zero, ``average_accuracy`` and ``last_played`` are None.
    """
    scores = [s.score for s in sessions]
    total = len(scores)

    if total == 0:
        return DomainSummary(
            user_id=user_id,
            domain=domain,
            period_start=period_start,
            period_end=period_end,
            total_sessions=0,
            average_score=0.0,
            median_score=0.0,
            best_score=0.0,
            score_stddev=0.0,
            average_accuracy=None,
            total_playtime_seconds=0,
            last_played=None,
            last_updated=computed_at,
        )

    accuracies = [s.accuracy for s in sessions if s.accuracy is not None]

    return DomainSummary(
        user_id=user_id,
        domain=domain,
        period_start=period_start,
        period_end=period_end,
        total_sessions=total,
        average_score=statistics.fmean(scores),
        median_score=float(statistics.median(scores)),
        best_score=float(max(scores)),
        # Population formula (divide by N)
        score_stddev=float(statistics.pstdev(scores)) if total > 1 else 0.0,
        average_accuracy=statistics.fmean(accuracies) if accuracies else None,
        total_playtime_seconds=sum(s.duration or 0 for s in sessions),
        last_played=max(s.played_at for s in sessions),
        last_updated=computed_at,
    )
