"""Baseline schema: profiles, game sessions, domain summaries, personal logs.

user_id columns hold the identity provider subject and carry no foreign key.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_LOG_TABLES = (
    "productivity_logs",
    "fitness_logs",
    "study_logs",
    "wellbeing_logs",
    "screentime_logs",
    "custom_metrics",
)


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY,
            email VARCHAR(320) NOT NULL,
            full_name VARCHAR(128),
            avatar_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Game Sessions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_sessions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            game_type VARCHAR(32) NOT NULL,
            game_name VARCHAR(64),
            score INTEGER NOT NULL CHECK (score >= 0),
            accuracy DOUBLE PRECISION CHECK (accuracy >= 0 AND accuracy <= 100),
            reaction_time DOUBLE PRECISION,
            duration INTEGER,
            level INTEGER,
            metadata JSONB NOT NULL DEFAULT '{}',
            played_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_game_sessions_user_type_played
        ON game_sessions(user_id, game_type, played_at)
    """)

    # --- Domain Performance ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS domain_performance (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            domain VARCHAR(32) NOT NULL,
            period_start DATE NOT NULL,
            period_end DATE NOT NULL,
            total_sessions INTEGER NOT NULL DEFAULT 0,
            average_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            median_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            best_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            score_stddev DOUBLE PRECISION NOT NULL DEFAULT 0,
            average_accuracy DOUBLE PRECISION,
            total_playtime_seconds INTEGER NOT NULL DEFAULT 0,
            last_played TIMESTAMPTZ,
            last_updated TIMESTAMPTZ NOT NULL,
            CONSTRAINT domain_performance_user_domain_period_key
                UNIQUE (user_id, domain, period_start, period_end),
            CHECK (period_start <= period_end)
        )
    """)

    # --- Performance Metrics ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS performance_metrics (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            game_type VARCHAR(32) NOT NULL,
            total_games INTEGER NOT NULL DEFAULT 0,
            average_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            average_accuracy DOUBLE PRECISION,
            best_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            total_playtime INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_performance_metrics_user_id
        ON performance_metrics(user_id)
    """)

    # --- Personal Logs ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS productivity_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            date DATE NOT NULL,
            tasks_completed INTEGER NOT NULL DEFAULT 0,
            tasks_total INTEGER NOT NULL DEFAULT 0,
            focus_time_minutes INTEGER NOT NULL DEFAULT 0,
            breaks_taken INTEGER NOT NULL DEFAULT 0,
            productivity_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS fitness_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            date DATE NOT NULL,
            workout_type VARCHAR(64),
            duration_minutes INTEGER NOT NULL DEFAULT 0,
            calories_burned INTEGER NOT NULL DEFAULT 0,
            distance_km DOUBLE PRECISION NOT NULL DEFAULT 0,
            heart_rate_avg INTEGER,
            heart_rate_max INTEGER,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS study_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            date DATE NOT NULL,
            subject VARCHAR(128),
            study_time_minutes INTEGER NOT NULL DEFAULT 0,
            topics_covered INTEGER NOT NULL DEFAULT 0,
            comprehension_score DOUBLE PRECISION,
            notes_taken INTEGER NOT NULL DEFAULT 0,
            quiz_score DOUBLE PRECISION,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS wellbeing_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            date DATE NOT NULL,
            mood_score INTEGER,
            stress_level INTEGER,
            sleep_hours DOUBLE PRECISION,
            energy_level INTEGER,
            meditation_minutes INTEGER NOT NULL DEFAULT 0,
            journal_entries INTEGER NOT NULL DEFAULT 0,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS screentime_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            date DATE NOT NULL,
            total_minutes INTEGER NOT NULL DEFAULT 0,
            phone_minutes INTEGER NOT NULL DEFAULT 0,
            computer_minutes INTEGER NOT NULL DEFAULT 0,
            tablet_minutes INTEGER NOT NULL DEFAULT 0,
            apps_used INTEGER NOT NULL DEFAULT 0,
            notifications_count INTEGER NOT NULL DEFAULT 0,
            breaks_taken INTEGER NOT NULL DEFAULT 0,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS custom_metrics (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            metric_name VARCHAR(128) NOT NULL,
            metric_value DOUBLE PRECISION NOT NULL,
            metric_unit VARCHAR(32),
            category VARCHAR(64),
            date DATE NOT NULL,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    for table in _LOG_TABLES:
        op.execute(f"CREATE INDEX IF NOT EXISTS ix_{table}_user_id ON {table}(user_id)")


def downgrade() -> None:
    for table in (*_LOG_TABLES, "performance_metrics", "domain_performance", "game_sessions", "profiles"):
        op.execute(f"DROP TABLE IF EXISTS {table}")
