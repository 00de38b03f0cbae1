"""Tests for the HTTP query surface."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from button_monitor.api.presses import create_presses_router
from button_monitor.store.event_store import EventStore

from tests.test_press import _press


@pytest.fixture
def store() -> EventStore:
    return EventStore(capacity=5)


@pytest.fixture
def client(store: EventStore) -> TestClient:
    app = FastAPI()
    app.include_router(create_presses_router(store))
    return TestClient(app)


class TestPressesEndpoint:
    def test_empty_history(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == []

    def test_history_in_insertion_order(self, client: TestClient, store: EventStore) -> None:
        store.append(_press(timestamp=2, press_count=3))
        store.append(_press(timestamp=1, seconds_left_at_trigger=5.5, category="flair-press-1"))
        body = client.get("/").json()
        assert body == [
            {
                "secondsLeftAtTrigger": 55.0,
                "timestamp": 2,
                "category": "flair-press-6",
                "pressCount": 3,
            },
            {
                "secondsLeftAtTrigger": 5.5,
                "timestamp": 1,
                "category": "flair-press-1",
                "pressCount": 1,
            },
        ]


class TestHealthEndpoint:
    def test_reports_store_state(self, client: TestClient, store: EventStore) -> None:
        store.append(_press())
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["entries"] == 1
        assert body["capacity"] == 5
        assert body["endpoint"] is None
