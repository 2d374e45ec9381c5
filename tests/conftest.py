"""Shared test fixtures."""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator, Sequence
from datetime import date, datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

os.environ["COGDASH_JWT_SECRET"] = "test-secret-for-hs256-tokens-0123456789"
os.environ["COGDASH_JWT_ALGORITHM"] = "HS256"
os.environ["COGDASH_LOG_FORMAT"] = "console"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from cogdash.analysis.dependencies import get_session_store, get_summary_repository  # noqa: E402
from cogdash.analysis.engine import DomainSummary  # noqa: E402
from cogdash.analysis.window import in_window  # noqa: E402
from cogdash.auth.jwt import create_access_token, reset_keys  # noqa: E402
from cogdash.config import get_settings  # noqa: E402
from cogdash.database import get_session  # noqa: E402
from cogdash.errors import StorageFailure  # noqa: E402
from cogdash.main import create_app  # noqa: E402

get_settings.cache_clear()
reset_keys()

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"


def make_session(
    score: int,
    played_at: datetime,
    *,
    user_id: str = USER_ID,
    game_type: str = "depth-perception",
    accuracy: float | None = None,
    duration: int | None = None,
) -> SimpleNamespace:
    """A stand-in for a stored game session row."""
    return SimpleNamespace(
        id=str(uuid.uuid4()),
        user_id=user_id,
        game_type=game_type,
        score=score,
        accuracy=accuracy,
        duration=duration,
        played_at=played_at,
    )


class FakeSessionStore:
    """In-memory session source applying the same window rule as the DB query."""

    def __init__(self, sessions: Sequence[Any] = (), failing_domains: Sequence[str] = ()) -> None:
        self.sessions = list(sessions)
        self.failing_domains = set(failing_domains)
        self.calls: list[tuple[str, str, date, date]] = []

    async def fetch_window(self, user_id: str, domain: str, period_start: date, period_end: date) -> list[Any]:
        self.calls.append((user_id, domain, period_start, period_end))
        if domain in self.failing_domains:
            raise StorageFailure("Failed to fetch game sessions", domain=domain, operation="fetch_window")
        return [
            s
            for s in self.sessions
            if s.user_id == user_id and s.game_type == domain and in_window(s.played_at, period_start, period_end)
        ]


class FakeSummaryRepository:
    """In-memory summary store keyed by the natural key."""

    def __init__(self, failing_domains: Sequence[str] = (), failing_reads: Sequence[str] = ()) -> None:
        self.rows: dict[tuple[str, str, date, date], DomainSummary] = {}
        self.failing_domains = set(failing_domains)
        self.failing_reads = set(failing_reads)
        self.reads = 0
        self.writes = 0

    async def get(self, user_id: str, domain: str, period_start: date, period_end: date) -> DomainSummary | None:
        self.reads += 1
        if domain in self.failing_reads:
            raise StorageFailure("Failed to read domain summary", domain=domain, operation="get")
        return self.rows.get((user_id, domain, period_start, period_end))

    async def upsert(self, summary: DomainSummary) -> DomainSummary:
        if summary.domain in self.failing_domains:
            raise StorageFailure("Failed to upsert domain summary", domain=summary.domain, operation="upsert")
        self.writes += 1
        self.rows[summary.key] = summary
        return summary


def auth_headers(user_id: str = USER_ID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, 'player@example.com')}"}


def make_db() -> AsyncMock:
    """An AsyncSession double: sync ``add``, awaitable everything else."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def session_store() -> FakeSessionStore:
    return FakeSessionStore()


@pytest.fixture
def summary_repository() -> FakeSummaryRepository:
    return FakeSummaryRepository()


@pytest.fixture
def db() -> AsyncMock:
    return make_db()


@pytest.fixture
def app(session_store: FakeSessionStore, summary_repository: FakeSummaryRepository, db: AsyncMock) -> FastAPI:
    """Application with storage replaced by in-memory fakes."""
    application = create_app()

    async def _db() -> AsyncGenerator[AsyncMock, None]:
        yield db

    application.dependency_overrides[get_session] = _db
    application.dependency_overrides[get_session_store] = lambda: session_store
    application.dependency_overrides[get_summary_repository] = lambda: summary_repository
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, without running the lifespan."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)
