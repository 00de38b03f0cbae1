"""button-monitor — press history from the live countdown stream.

This is the application entry point.  It wires the EventStore,
PersistenceGateway, ingestion loop, and the HTTP query surface together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from button_monitor.api.presses import create_presses_router
from button_monitor.config import settings
from button_monitor.ingest.ingestor import ButtonIngestor
from button_monitor.ingest.resolver import EndpointResolver
from button_monitor.services.shutdown import ShutdownGuard
from button_monitor.store.event_store import EventStore
from button_monitor.store.persistence import PersistenceGateway

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

# ── State ────────────────────────────────────────────────────────────────────

gateway = PersistenceGateway.from_url(settings.database_url, key=settings.snapshot_key)

store = EventStore(capacity=settings.max_entries)

# ── Ingestion ────────────────────────────────────────────────────────────────

resolver = EndpointResolver(
    source_url=settings.source_url,
    retry_delay=settings.resolver_retry_seconds,
    timeout=settings.fetch_timeout_seconds,
    user_agent=settings.user_agent,
)

ingestor = ButtonIngestor(resolver, store)

# ── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    store.seed(await gateway.load())
    store.set_listener(gateway.schedule_save)
    ingestor.start()
    try:
        yield
    finally:
        await ingestor.stop()
        await gateway.drain()


# ── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    description="Bounded history of button presses derived from the live tick stream",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_presses_router(store, ingestor))


# ── Entrypoint ───────────────────────────────────────────────────────────────

def run() -> None:
    ShutdownGuard(
        gateway,
        store.snapshot,
        timeout=settings.shutdown_save_timeout_seconds,
    ).install()
    logger.info("App listening on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
