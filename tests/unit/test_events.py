"""Round events and the per-view listener."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from cogdash.games.events import RoundCompleted, RoundListener
from conftest import USER_ID


class TestRoundCompleted:
    def test_reaction_time_list_averaged(self) -> None:
        event = RoundCompleted(score=10, reaction_time=[200.0, 300.0, 400.0])
        assert event.mean_reaction_time() == 300.0

    def test_empty_reaction_time_list(self) -> None:
        assert RoundCompleted(score=10, reaction_time=[]).mean_reaction_time() is None

    def test_single_reaction_time(self) -> None:
        assert RoundCompleted(score=10, reaction_time=180.5).mean_reaction_time() == 180.5

    def test_save_request(self) -> None:
        event = RoundCompleted(score=42, accuracy=75.0, duration=30, level=2, metadata={"targets": 12})
        request = event.to_save_request("saccadic-movement", "Saccade Sprint")
        assert request.game_type == "saccadic-movement"
        assert request.game_name == "Saccade Sprint"
        assert request.score == 42
        assert request.metadata == {"targets": 12}

    def test_score_required_and_numeric(self) -> None:
        with pytest.raises(ValidationError):
            RoundCompleted.model_validate({"accuracy": 50})
        with pytest.raises(ValidationError):
            RoundCompleted.model_validate({"score": "lots"})

    def test_non_finite_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RoundCompleted.model_validate_json('{"score": Infinity}')
        with pytest.raises(ValidationError):
            RoundCompleted(score=10, reaction_time=[200.0, float("nan")])
        with pytest.raises(ValidationError):
            RoundCompleted(score=10, level=float("inf"))

    def test_oversized_score_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RoundCompleted(score=1e12)


class TestRoundListener:
    @pytest.mark.asyncio
    async def test_forwards_to_writer_for_its_user(self) -> None:
        writer = AsyncMock(return_value=SimpleNamespace(id="s-1", score=42))
        listener = RoundListener(USER_ID, "pursuit-follow", None, writer)

        session = await listener.on_round_completed(RoundCompleted(score=42, reaction_time=[1.0, 3.0]))

        assert session.id == "s-1"
        assert listener.rounds_saved == 1
        user_id, request = writer.await_args.args
        assert user_id == USER_ID
        assert request.game_type == "pursuit-follow"
        assert request.reaction_time == 2.0

    @pytest.mark.asyncio
    async def test_failed_write_not_counted(self) -> None:
        writer = AsyncMock(side_effect=RuntimeError("db down"))
        listener = RoundListener(USER_ID, "pursuit-follow", None, writer)

        with pytest.raises(RuntimeError):
            await listener.on_round_completed(RoundCompleted(score=1))
        assert listener.rounds_saved == 0
