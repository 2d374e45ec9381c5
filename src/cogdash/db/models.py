"""ORM models matching the Alembic baseline schema.

User identities come from the external identity provider; ``user_id``
columns hold its opaque UUID subject and carry no foreign key.
"""

from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from cogdash.db.base import Base

_UUID_DEFAULT = text("gen_random_uuid()")


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Profile(Base):
    """Maps to the 'profiles' table. ``id`` is the identity provider subject."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


# ---------------------------------------------------------------------------
# Games
# ---------------------------------------------------------------------------


class GameSession(Base):
    """One completed game round. Append-only."""

    __tablename__ = "game_sessions"
    __table_args__ = (
        Index("idx_game_sessions_user_type_played", "user_id", "game_type", "played_at"),
    )

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False)
    game_type: Mapped[str] = mapped_column(String(32), nullable=False)
    game_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    accuracy: Mapped[float | None] = mapped_column(Float, nullable=True)
    reaction_time: Mapped[float | None] = mapped_column(Float, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    game_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSONB, nullable=False, server_default="{}")
    played_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class DomainPerformance(Base):
    """Summary statistics for one (user, domain, period) window."""

    __tablename__ = "domain_performance"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "domain", "period_start", "period_end",
            name="domain_performance_user_domain_period_key",
        ),
    )

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False)
    domain: Mapped[str] = mapped_column(String(32), nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    total_sessions: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    average_score: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    median_score: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    best_score: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    score_stddev: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    average_accuracy: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_playtime_seconds: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    last_played: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PerformanceMetrics(Base):
    """Per-game-type running totals kept by the dashboard."""

    __tablename__ = "performance_metrics"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    game_type: Mapped[str] = mapped_column(String(32), nullable=False)
    total_games: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    average_score: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    average_accuracy: Mapped[float | None] = mapped_column(Float, nullable=True)
    best_score: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    total_playtime: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


# ---------------------------------------------------------------------------
# Personal logs
# ---------------------------------------------------------------------------


class ProductivityLog(Base):
    __tablename__ = "productivity_logs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    tasks_completed: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    tasks_total: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    focus_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    breaks_taken: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    productivity_score: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class FitnessLog(Base):
    __tablename__ = "fitness_logs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    workout_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    calories_burned: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    distance_km: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    heart_rate_avg: Mapped[int | None] = mapped_column(Integer, nullable=True)
    heart_rate_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class StudyLog(Base):
    __tablename__ = "study_logs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    subject: Mapped[str | None] = mapped_column(String(128), nullable=True)
    study_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    topics_covered: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    comprehension_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes_taken: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    quiz_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class WellbeingLog(Base):
    __tablename__ = "wellbeing_logs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    mood_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stress_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sleep_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    energy_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    meditation_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    journal_entries: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class ScreentimeLog(Base):
    __tablename__ = "screentime_logs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    total_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    phone_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    computer_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    tablet_minutes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    apps_used: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    notifications_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    breaks_taken: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class CustomMetric(Base):
    __tablename__ = "custom_metrics"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=_UUID_DEFAULT)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    metric_name: Mapped[str] = mapped_column(String(128), nullable=False)
    metric_value: Mapped[float] = mapped_column(Float, nullable=False)
    metric_unit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))
