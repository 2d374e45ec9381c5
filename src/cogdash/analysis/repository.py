"""Domain summary persistence.

One row per (user_id, domain, period_start, period_end). Writes go through a
single ``INSERT ... ON CONFLICT DO UPDATE`` so concurrent recomputes of the
same key serialize in PostgreSQL with last-write-wins, and a failed write
leaves the previous row untouched.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.analysis.engine import DomainSummary
from cogdash.db.models import DomainPerformance
from cogdash.errors import StorageFailure

logger = logging.getLogger(__name__)

NATURAL_KEY_CONSTRAINT = "domain_performance_user_domain_period_key"

# Every non-key column is replaced on conflict; nothing is merged.
REPLACED_COLUMNS = (
    "total_sessions",
    "average_score",
    "median_score",
    "best_score",
    "score_stddev",
    "average_accuracy",
    "total_playtime_seconds",
    "last_played",
    "last_updated",
)


def to_summary(row: DomainPerformance) -> DomainSummary:
    """Convert an ORM row to the engine's value object."""
    return DomainSummary(
        user_id=str(row.user_id),
        domain=row.domain,
        period_start=row.period_start,
        period_end=row.period_end,
        total_sessions=row.total_sessions,
        average_score=row.average_score,
        median_score=row.median_score,
        best_score=row.best_score,
        score_stddev=row.score_stddev,
        average_accuracy=row.average_accuracy,
        total_playtime_seconds=row.total_playtime_seconds,
        last_played=row.last_played,
        last_updated=row.last_updated,
    )


class DomainSummaryRepository:
    """Reads and upserts domain summaries by natural key."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(
        self,
        user_id: str,
        domain: str,
        period_start: date,
        period_end: date,
    ) -> DomainSummary | None:
        """Get the summary for an exact key, or None if never computed."""
        try:
            result = await self._db.execute(
                select(DomainPerformance).where(
                    DomainPerformance.user_id == user_id,
                    DomainPerformance.domain == domain,
                    DomainPerformance.period_start == period_start,
                    DomainPerformance.period_end == period_end,
                )
            )
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StorageFailure(
                "Failed to read domain summary",
                domain=domain,
                operation="get",
            ) from e
        return to_summary(row) if row is not None else None

    async def upsert(self, summary: DomainSummary) -> DomainSummary:
        """Insert or fully replace the row for ``summary.key``."""
        stmt = pg_insert(DomainPerformance).values(**summary.summary_fields())
        stmt = stmt.on_conflict_do_update(
            constraint=NATURAL_KEY_CONSTRAINT,
            set_={column: stmt.excluded[column] for column in REPLACED_COLUMNS},
        ).returning(DomainPerformance)

        try:
            result = await self._db.scalars(
                stmt,
                execution_options={"populate_existing": True},
            )
            row = result.one()
            stored = to_summary(row)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StorageFailure(
                "Failed to upsert domain summary",
                domain=summary.domain,
                operation="upsert",
            ) from e

        logger.debug(
            "Upserted %s summary for user %s (%s..%s, %d sessions)",
            summary.domain,
            summary.user_id,
            summary.period_start,
            summary.period_end,
            summary.total_sessions,
        )
        return stored
