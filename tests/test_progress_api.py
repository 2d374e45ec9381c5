"""Progress and analytics views."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from cogdash.db.models import GameSession, PerformanceMetrics, StudyLog
from cogdash.domains import DOMAINS
from cogdash.records.registry import LOG_TABLES
from conftest import USER_ID, auth_headers


def _result(rows: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


def _game_session() -> GameSession:
    return GameSession(
        id=str(uuid.uuid4()),
        user_id=USER_ID,
        game_type="eye-hand-coordination",
        game_name="Tap Tap",
        score=77,
        accuracy=66.0,
        reaction_time=None,
        duration=20,
        level=1,
        game_metadata={},
        played_at=datetime(2025, 6, 1, tzinfo=timezone.utc),
    )


@pytest.mark.asyncio
async def test_analytics(client: AsyncClient, db: AsyncMock) -> None:
    metrics = PerformanceMetrics(
        id=str(uuid.uuid4()),
        user_id=USER_ID,
        game_type="eye-hand-coordination",
        total_games=3,
        average_score=70.0,
        best_score=90.0,
        total_playtime=60,
    )
    db.execute.side_effect = [_result([metrics]), _result([_game_session()])]

    response = await client.get("/api/analytics", headers=auth_headers())
    assert response.status_code == 200
    data = response.json()
    assert data["performance_metrics"][0]["total_games"] == 3
    assert data["recent_sessions"][0]["score"] == 77


@pytest.mark.asyncio
async def test_progress(client: AsyncClient, db: AsyncMock) -> None:
    study = StudyLog(
        id=str(uuid.uuid4()),
        user_id=USER_ID,
        date=date(2025, 6, 2),
        subject="Algebra",
        study_time_minutes=45,
    )
    results = {name: _result([]) for name in LOG_TABLES}
    results["study_logs"] = _result([study])
    db.execute.side_effect = [*results.values(), _result([_game_session()])]

    response = await client.get("/api/progress", headers=auth_headers())
    assert response.status_code == 200
    data = response.json()
    assert set(data["logs"]) == set(LOG_TABLES)
    assert data["logs"]["study_logs"][0]["subject"] == "Algebra"
    assert data["logs"]["fitness_logs"] == []
    assert len(data["recent_sessions"]) == 1
    assert data["domain_performance"]["statuses"] == {domain: "absent" for domain in DOMAINS}


@pytest.mark.asyncio
async def test_progress_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/progress")
    assert response.status_code == 401
