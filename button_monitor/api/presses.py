"""Read-only HTTP query surface over the press history.

Path: /         full history, oldest first, camelCase records
Path: /health   operational probe
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter

from button_monitor.ingest.ingestor import ButtonIngestor
from button_monitor.store.event_store import EventStore


def create_presses_router(
    store: EventStore,
    ingestor: Optional[ButtonIngestor] = None,
) -> APIRouter:
    """Factory that wires the query endpoints to a concrete EventStore.

    Args:
        store: The EventStore to read from.
        ingestor: Optional ingestor whose session state /health reports.
    """
    router = APIRouter()

    @router.get("/")
    async def list_presses() -> list[dict]:
        return [press.to_record() for press in store.snapshot()]

    @router.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "entries": len(store),
            "capacity": store.capacity,
            "sessions_opened": ingestor.sessions_opened if ingestor else 0,
            "endpoint": ingestor.current_endpoint if ingestor else None,
        }

    return router
