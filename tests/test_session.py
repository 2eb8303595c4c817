"""Tests for per-dashboard analysis sessions."""

from __future__ import annotations

import asyncio

import pytest

from app.exceptions import ConflictError, ErrorKind, NotFoundError
from app.sentiment.service import SentimentService
from app.sentiment.session import AnalysisSession, SessionRegistry
from tests.helpers.fake_clients import GatedClient, ScriptedClient


def _service(client: ScriptedClient) -> SentimentService:
    return SentimentService(client, model="test-model")


class TestAnalysisSession:

    def test_initial_state(self) -> None:
        state = AnalysisSession("s1").state
        assert state.session_id == "s1"
        assert state.report is None
        assert state.error is None
        assert state.is_loading is False

    @pytest.mark.asyncio
    async def test_success_populates_report(self, scripted_client: ScriptedClient) -> None:
        session = AnalysisSession("s1")
        state = await session.run(_service(scripted_client), " tsla ")

        assert state.symbol == "TSLA"
        assert state.last_analyzed_symbol == "TSLA"
        assert state.report is not None
        assert state.report.total_comments == 35
        assert state.error is None
        assert state.is_loading is False
        assert not session.is_pending

    @pytest.mark.asyncio
    async def test_rejection_is_a_notice(self) -> None:
        client = ScriptedClient(text='{"validSymbol": false, "error": "bad ticker"}')
        state = await AnalysisSession("s1").run(_service(client), "ZZZZ")

        assert state.report is None
        assert state.error is not None
        assert state.error.error == ErrorKind.SYMBOL_REJECTED
        assert state.error.severity == "notice"
        assert state.error.message == "bad ticker"

    @pytest.mark.asyncio
    async def test_blank_symbol_is_an_error_without_a_call(
        self, scripted_client: ScriptedClient
    ) -> None:
        state = await AnalysisSession("s1").run(_service(scripted_client), "  ")

        assert state.error is not None
        assert state.error.error == ErrorKind.EMPTY_SYMBOL
        assert state.error.severity == "error"
        assert scripted_client.requests == []

    @pytest.mark.asyncio
    async def test_new_run_clears_previous_report(self, valid_text: str) -> None:
        session = AnalysisSession("s1")
        await session.run(_service(ScriptedClient(text=valid_text)), "TSLA")
        state = await session.run(_service(ScriptedClient(text="garbage")), "AAPL")

        assert state.report is None
        assert state.error is not None
        assert state.error.error == ErrorKind.MALFORMED_RESPONSE
        assert state.last_analyzed_symbol == "TSLA"

    @pytest.mark.asyncio
    async def test_second_run_while_pending_conflicts(self, valid_text: str) -> None:
        client = GatedClient(text=valid_text)
        session = AnalysisSession("s1")

        first = asyncio.create_task(session.run(_service(client), "TSLA"))
        await client.started.wait()
        assert session.state.is_loading is True

        with pytest.raises(ConflictError) as exc_info:
            await session.run(_service(client), "AAPL")
        assert exc_info.value.code == ErrorKind.ANALYSIS_IN_PROGRESS

        client.release()
        state = await first
        assert state.report is not None
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_abandoned_result_is_discarded(self, valid_text: str) -> None:
        client = GatedClient(text=valid_text)
        session = AnalysisSession("s1")

        task = asyncio.create_task(session.run(_service(client), "TSLA"))
        await client.started.wait()
        session.abandon()
        assert session.state.is_loading is False

        client.release()
        state = await task
        assert state.report is None
        assert state.last_analyzed_symbol is None
        assert not session.is_pending

    @pytest.mark.asyncio
    async def test_abandoned_run_does_not_overwrite_newer_run(self, valid_text: str) -> None:
        slow = GatedClient(text="garbage")
        session = AnalysisSession("s1")

        stale = asyncio.create_task(session.run(_service(slow), "TSLA"))
        await slow.started.wait()
        session.abandon()

        state = await session.run(_service(ScriptedClient(text=valid_text)), "AAPL")
        assert state.last_analyzed_symbol == "AAPL"

        slow.release()
        await stale
        assert session.state.error is None
        assert session.state.report is not None
        assert session.state.symbol == "AAPL"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_recorded_and_raised(self) -> None:
        session = AnalysisSession("s1")
        client = ScriptedClient(error=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await session.run(_service(client), "TSLA")

        state = session.state
        assert state.is_loading is False
        assert state.report is None
        assert state.error is not None
        assert state.error.error == ErrorKind.INTERNAL_ERROR
        assert state.error.severity == "error"
        assert not session.is_pending

    def test_abandon_when_idle_is_a_no_op(self) -> None:
        session = AnalysisSession("s1")
        session.abandon()
        assert session.state.is_loading is False


class TestSessionRegistry:

    def test_get_or_create_reuses_session(self) -> None:
        registry = SessionRegistry()
        assert registry.get_or_create("a") is registry.get_or_create("a")

    def test_unknown_session(self) -> None:
        with pytest.raises(NotFoundError):
            SessionRegistry().get("missing")

    def test_full_registry_evicts_least_recently_used(self) -> None:
        registry = SessionRegistry(max_sessions=2)
        registry.get_or_create("a")
        registry.get_or_create("b")
        registry.get("a")
        registry.get_or_create("c")

        assert len(registry) == 2
        assert registry.get("a").session_id == "a"
        assert registry.get("c").session_id == "c"
        with pytest.raises(NotFoundError):
            registry.get("b")

    @pytest.mark.asyncio
    async def test_pending_sessions_are_not_evicted(self, valid_text: str) -> None:
        registry = SessionRegistry(max_sessions=2)
        client = GatedClient(text=valid_text)
        busy = registry.get_or_create("busy")
        task = asyncio.create_task(busy.run(_service(client), "TSLA"))
        await client.started.wait()

        registry.get_or_create("idle")
        registry.get_or_create("new")

        assert registry.get("busy") is busy
        with pytest.raises(NotFoundError):
            registry.get("idle")

        client.release()
        await task
        assert busy.state.report is not None

    def test_many_sessions_stay_bounded(self) -> None:
        registry = SessionRegistry(max_sessions=10)
        for index in range(500):
            registry.get_or_create(f"s{index}")
        assert len(registry) == 10

    def test_drop_removes_session(self) -> None:
        registry = SessionRegistry()
        registry.get_or_create("a")
        registry.drop("a")
        with pytest.raises(NotFoundError):
            registry.get("a")
