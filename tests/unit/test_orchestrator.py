"""Aggregation orchestrator: idempotence, failure isolation, exact-key reads."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from cogdash.analysis.orchestrator import AggregationOrchestrator, OutcomeStatus
from cogdash.domains import DOMAINS
from cogdash.errors import ValidationFailed
from conftest import OTHER_USER_ID, USER_ID, FakeSessionStore, FakeSummaryRepository, make_session

START = date(2025, 6, 1)
END = date(2025, 6, 30)
NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


def _orchestrator(store: FakeSessionStore, repo: FakeSummaryRepository) -> AggregationOrchestrator:
    return AggregationOrchestrator(store, repo, clock=lambda: NOW)


def _sessions() -> list:
    return [
        make_session(100, datetime(2025, 6, 2, tzinfo=timezone.utc), game_type="depth-perception", accuracy=80.0),
        make_session(200, datetime(2025, 6, 3, tzinfo=timezone.utc), game_type="depth-perception", accuracy=90.0),
        make_session(50, datetime(2025, 6, 30, 23, 59, tzinfo=timezone.utc), game_type="pursuit-follow"),
        # Outside the window
        make_session(999, datetime(2025, 7, 1, tzinfo=timezone.utc), game_type="pursuit-follow"),
        # Someone else's
        make_session(999, datetime(2025, 6, 5, tzinfo=timezone.utc), user_id=OTHER_USER_ID),
    ]


class TestComputeForUser:
    @pytest.mark.asyncio
    async def test_every_domain_persisted(self) -> None:
        repo = FakeSummaryRepository()
        run = await _orchestrator(FakeSessionStore(_sessions()), repo).compute_for_user(USER_ID, START, END)

        assert set(run.domains()) == set(DOMAINS)
        assert len(repo.rows) == len(DOMAINS)
        depth = run.domains()["depth-perception"]
        assert depth is not None
        assert depth.total_sessions == 2
        assert depth.average_score == 150.0
        assert depth.average_accuracy == 85.0

    @pytest.mark.asyncio
    async def test_window_filtering_and_user_isolation(self) -> None:
        run = await _orchestrator(FakeSessionStore(_sessions()), FakeSummaryRepository()).compute_for_user(
            USER_ID, START, END
        )
        pursuit = run.domains()["pursuit-follow"]
        assert pursuit is not None
        assert pursuit.total_sessions == 1
        assert pursuit.best_score == 50.0

    @pytest.mark.asyncio
    async def test_empty_domains_are_computed_not_absent(self) -> None:
        run = await _orchestrator(FakeSessionStore(_sessions()), FakeSummaryRepository()).compute_for_user(
            USER_ID, START, END
        )
        statuses = run.statuses()
        assert statuses["depth-perception"] is OutcomeStatus.OK
        assert statuses["eye-hand-coordination"] is OutcomeStatus.EMPTY
        saccadic = run.domains()["saccadic-movement"]
        assert saccadic is not None
        assert saccadic.total_sessions == 0
        assert saccadic.average_accuracy is None

    @pytest.mark.asyncio
    async def test_recompute_is_idempotent(self) -> None:
        store = FakeSessionStore(_sessions())
        repo = FakeSummaryRepository()
        orchestrator = _orchestrator(store, repo)

        first = await orchestrator.compute_for_user(USER_ID, START, END)
        second = await orchestrator.compute_for_user(USER_ID, START, END)

        assert len(repo.rows) == len(DOMAINS)
        for domain in DOMAINS:
            assert first.domains()[domain].statistics_equal(second.domains()[domain])

    @pytest.mark.asyncio
    async def test_new_session_replaces_summary(self) -> None:
        store = FakeSessionStore(_sessions())
        repo = FakeSummaryRepository()
        orchestrator = _orchestrator(store, repo)
        await orchestrator.compute_for_user(USER_ID, START, END)

        store.sessions.append(
            make_session(10, datetime(2025, 6, 10, tzinfo=timezone.utc), game_type="saccadic-movement")
        )
        run = await orchestrator.compute_for_user(USER_ID, START, END)

        assert repo.rows[(USER_ID, "saccadic-movement", START, END)].total_sessions == 1
        assert run.statuses()["saccadic-movement"] is OutcomeStatus.OK

    @pytest.mark.asyncio
    async def test_default_window_uses_clock(self) -> None:
        store = FakeSessionStore()
        run = await _orchestrator(store, FakeSummaryRepository()).compute_for_user(USER_ID)

        assert (run.period_start, run.period_end) == (date(2025, 5, 31), date(2025, 6, 30))
        assert store.calls[0][2:] == (date(2025, 5, 31), date(2025, 6, 30))

    @pytest.mark.asyncio
    async def test_start_after_end_rejected_before_reads(self) -> None:
        store = FakeSessionStore()
        with pytest.raises(ValidationFailed):
            await _orchestrator(store, FakeSummaryRepository()).compute_for_user(USER_ID, END, START)
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_upsert_failure_isolated_to_its_domain(self) -> None:
        repo = FakeSummaryRepository(failing_domains=["pursuit-follow"])
        run = await _orchestrator(FakeSessionStore(_sessions()), repo).compute_for_user(USER_ID, START, END)

        assert run.statuses()["pursuit-follow"] is OutcomeStatus.FAILED
        assert run.domains()["pursuit-follow"] is None
        assert "pursuit-follow" in run.errors()
        assert len(repo.rows) == len(DOMAINS) - 1
        assert (USER_ID, "depth-perception", START, END) in repo.rows

    @pytest.mark.asyncio
    async def test_fetch_failure_isolated_to_its_domain(self) -> None:
        store = FakeSessionStore(_sessions(), failing_domains=["depth-perception"])
        run = await _orchestrator(store, FakeSummaryRepository()).compute_for_user(USER_ID, START, END)

        assert run.statuses()["depth-perception"] is OutcomeStatus.FAILED
        assert run.statuses()["pursuit-follow"] is OutcomeStatus.OK

    @pytest.mark.asyncio
    async def test_driver_error_text_not_returned(self) -> None:
        class UnreachableStore(FakeSessionStore):
            async def fetch_window(self, user_id, domain, period_start, period_end):
                raise OSError("connection to 10.0.0.5:5432 refused")

        run = await _orchestrator(UnreachableStore(), FakeSummaryRepository()).compute_for_user(USER_ID, START, END)

        assert set(run.errors().values()) == {"Storage failure"}
        assert all("10.0.0.5" not in error for error in run.errors().values())

    @pytest.mark.asyncio
    async def test_app_error_message_returned(self) -> None:
        store = FakeSessionStore(_sessions(), failing_domains=["depth-perception"])
        run = await _orchestrator(store, FakeSummaryRepository()).compute_for_user(USER_ID, START, END)

        assert run.errors() == {"depth-perception": "Failed to fetch game sessions"}


class TestReadSummaries:
    @pytest.mark.asyncio
    async def test_never_computed_is_absent(self) -> None:
        store = FakeSessionStore(_sessions())
        run = await _orchestrator(store, FakeSummaryRepository()).read_summaries(USER_ID, START, END)

        assert all(summary is None for summary in run.domains().values())
        assert set(run.statuses().values()) == {OutcomeStatus.ABSENT}
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_exact_key_only(self) -> None:
        repo = FakeSummaryRepository()
        orchestrator = _orchestrator(FakeSessionStore(_sessions()), repo)
        await orchestrator.compute_for_user(USER_ID, START, END)

        same = await orchestrator.read_summaries(USER_ID, START, END)
        shifted = await orchestrator.read_summaries(USER_ID, date(2025, 6, 2), END)

        assert same.domains()["depth-perception"].total_sessions == 2
        assert same.statuses()["eye-hand-coordination"] is OutcomeStatus.EMPTY
        assert all(summary is None for summary in shifted.domains().values())

    @pytest.mark.asyncio
    async def test_read_failure_reported_per_domain(self) -> None:
        repo = FakeSummaryRepository(failing_reads=["saccadic-movement"])
        orchestrator = _orchestrator(FakeSessionStore(_sessions()), repo)
        await orchestrator.compute_for_user(USER_ID, START, END)

        run = await orchestrator.read_summaries(USER_ID, START, END)

        assert run.statuses()["saccadic-movement"] is OutcomeStatus.FAILED
        assert run.domains()["saccadic-movement"] is None
        assert run.domains()["depth-perception"] is not None

    @pytest.mark.asyncio
    async def test_read_driver_error_text_not_returned(self) -> None:
        class UnreachableRepository(FakeSummaryRepository):
            async def get(self, user_id, domain, period_start, period_end):
                raise ConnectionRefusedError("connect to db.internal:5432 failed")

        run = await _orchestrator(FakeSessionStore(), UnreachableRepository()).read_summaries(USER_ID, START, END)

        assert set(run.statuses().values()) == {OutcomeStatus.FAILED}
        assert set(run.errors().values()) == {"Storage failure"}
