"""Game session save and history endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from cogdash.db.models import GameSession
from conftest import USER_ID, auth_headers


async def _assign_id(obj: GameSession) -> None:
    obj.id = str(uuid.uuid4())


@pytest.fixture
def saving_db(db: AsyncMock) -> AsyncMock:
    db.refresh.side_effect = _assign_id
    return db


def _saved(db: AsyncMock) -> GameSession:
    db.add.assert_called_once()
    return db.add.call_args.args[0]


class TestSave:
    @pytest.mark.asyncio
    async def test_save(self, client: AsyncClient, saving_db: AsyncMock) -> None:
        response = await client.post(
            "/api/game/save",
            json={
                "game_type": "depth-perception",
                "game_name": "Depth Dash",
                "score": 150,
                "accuracy": 92.5,
                "reaction_time": 310.0,
                "duration": 45,
                "level": 3,
                "metadata": {"targets": 20},
            },
            headers=auth_headers(),
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user_id"] == USER_ID
        assert data["score"] == 150
        assert data["metadata"] == {"targets": 20}
        saving_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_values_clamped(self, client: AsyncClient, saving_db: AsyncMock) -> None:
        response = await client.post(
            "/api/game/save",
            json={"game_type": "pursuit-follow", "score": -10, "accuracy": 140, "level": 0},
            headers=auth_headers(),
        )
        assert response.status_code == 201
        session = _saved(saving_db)
        assert session.score == 0
        assert session.accuracy == 100.0
        assert session.level == 1
        assert session.game_metadata == {}
        assert session.played_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_unknown_game_type(self, client: AsyncClient, saving_db: AsyncMock) -> None:
        response = await client.post(
            "/api/game/save",
            json={"game_type": "chess", "score": 10},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert "depth-perception" in response.json()["allowed"]
        saving_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_score_required(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/game/save",
            json={"game_type": "pursuit-follow"},
            headers=auth_headers(),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_numeric_score(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/game/save",
            json={"game_type": "pursuit-follow", "score": "12"},
            headers=auth_headers(),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_finite_score_rejected(self, client: AsyncClient, db: AsyncMock) -> None:
        response = await client.post(
            "/api/game/save",
            content=b'{"game_type": "pursuit-follow", "score": Infinity}',
            headers={**auth_headers(), "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"
        assert all("input" not in err for err in response.json()["details"])
        db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_nan_accuracy_rejected(self, client: AsyncClient, db: AsyncMock) -> None:
        response = await client.post(
            "/api/game/save",
            content=b'{"game_type": "pursuit-follow", "score": 10, "accuracy": NaN}',
            headers={**auth_headers(), "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_score_beyond_column_range_rejected(self, client: AsyncClient, db: AsyncMock) -> None:
        response = await client.post(
            "/api/game/save",
            json={"game_type": "pursuit-follow", "score": 1e12},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_failure(self, client: AsyncClient, db: AsyncMock) -> None:
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("connection reset"))
        response = await client.post(
            "/api/game/save",
            json={"game_type": "pursuit-follow", "score": 10},
            headers=auth_headers(),
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to save game session"
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient) -> None:
        response = await client.post("/api/game/save", json={"game_type": "pursuit-follow", "score": 1})
        assert response.status_code == 401


class TestHistory:
    @pytest.mark.asyncio
    async def test_history_rows(self, client: AsyncClient, db: AsyncMock) -> None:
        row = SimpleNamespace(
            id=str(uuid.uuid4()),
            user_id=USER_ID,
            game_type="saccadic-movement",
            game_name=None,
            score=40,
            accuracy=None,
            reaction_time=None,
            duration=None,
            level=None,
            game_metadata={},
            played_at=datetime(2025, 6, 1, tzinfo=timezone.utc),
        )
        result = MagicMock()
        result.scalars.return_value.all.return_value = [row]
        db.execute.return_value = result

        response = await client.get("/api/game/history", headers=auth_headers())
        assert response.status_code == 200
        sessions = response.json()["sessions"]
        assert [s["score"] for s in sessions] == [40]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("query", "expected"), [({}, 50), ({"limit": 20}, 20), ({"limit": 500}, 100)])
    async def test_limit_default_and_cap(
        self,
        client: AsyncClient,
        monkeypatch: pytest.MonkeyPatch,
        query: dict,
        expected: int,
    ) -> None:
        history = AsyncMock(return_value=[])
        monkeypatch.setattr("cogdash.games.router.get_game_history", history)

        response = await client.get("/api/game/history", params=query, headers=auth_headers())
        assert response.status_code == 200
        assert history.await_args.kwargs["limit"] == expected

    @pytest.mark.asyncio
    async def test_non_positive_limit_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/api/game/history", params={"limit": 0}, headers=auth_headers())
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_game_type_filter(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/game/history",
            params={"game_type": "chess"},
            headers=auth_headers(),
        )
        assert response.status_code == 400
