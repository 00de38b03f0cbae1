"""Tests for the ButtonIngestor resolve → stream → re-resolve loop."""

import asyncio
import logging

import pytest

from button_monitor.domain.press import PressEvent
from button_monitor.ingest.ingestor import ButtonIngestor
from button_monitor.store.event_store import EventStore

from tests.test_press import _press


class _FakeResolver:
    def __init__(self, endpoints: list[str]) -> None:
        self._endpoints = list(endpoints)
        self.calls = 0

    async def resolve(self) -> str:
        self.calls += 1
        return self._endpoints.pop(0)


class _FakeSession:
    """Emits canned presses, then closes.  Tracks how many are open."""

    open_now = 0
    max_open = 0

    def __init__(self, endpoint: str, on_press, presses: list[PressEvent]) -> None:
        self.endpoint = endpoint
        self._on_press = on_press
        self._presses = presses
        self.closed = False

    async def run(self) -> None:
        _FakeSession.open_now += 1
        _FakeSession.max_open = max(_FakeSession.max_open, _FakeSession.open_now)
        for press in self._presses:
            await asyncio.sleep(0)
            self._on_press(press)
        _FakeSession.open_now -= 1
        self.closed = True


@pytest.fixture(autouse=True)
def _reset_session_counters() -> None:
    _FakeSession.open_now = 0
    _FakeSession.max_open = 0


class TestButtonIngestor:
    @pytest.mark.asyncio
    async def test_close_triggers_exactly_one_new_resolve(self) -> None:
        resolver = _FakeResolver(["wss://a.test", "wss://b.test"])
        sessions = []

        def factory(endpoint, on_press):
            session = _FakeSession(endpoint, on_press, [])
            sessions.append(session)
            return session

        ingestor = ButtonIngestor(resolver, EventStore(capacity=10), session_factory=factory)
        await ingestor.run(max_sessions=2)

        assert resolver.calls == 2
        assert [s.endpoint for s in sessions] == ["wss://a.test", "wss://b.test"]
        assert ingestor.sessions_opened == 2
        assert _FakeSession.max_open == 1

    @pytest.mark.asyncio
    async def test_presses_reach_the_store(self) -> None:
        store = EventStore(capacity=10)
        resolver = _FakeResolver(["wss://a.test"])
        presses = [_press(timestamp=1), _press(timestamp=2)]
        ingestor = ButtonIngestor(
            resolver,
            store,
            session_factory=lambda endpoint, on_press: _FakeSession(endpoint, on_press, presses),
        )
        await ingestor.run(max_sessions=1)
        assert [p.timestamp for p in store.snapshot()] == [1, 2]

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        class _BlockingResolver:
            async def resolve(self) -> str:
                await asyncio.Event().wait()
                return "unreachable"

        ingestor = ButtonIngestor(_BlockingResolver(), EventStore(capacity=10))
        ingestor.start()
        await asyncio.sleep(0)
        assert ingestor.running
        assert ingestor.current_endpoint is None
        await ingestor.stop()
        assert not ingestor.running

    @pytest.mark.asyncio
    async def test_unexpected_failure_logged_and_stop_is_quiet(self, caplog) -> None:
        class _BrokenResolver:
            async def resolve(self) -> str:
                raise RuntimeError("resolver bug")

        ingestor = ButtonIngestor(_BrokenResolver(), EventStore(capacity=10))
        with caplog.at_level(logging.ERROR, logger="button_monitor.ingest.ingestor"):
            ingestor.start()
            for _ in range(5):
                await asyncio.sleep(0)
        assert not ingestor.running
        assert any("died unexpectedly" in r.getMessage() for r in caplog.records)
        await ingestor.stop()
