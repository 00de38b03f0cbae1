"""PersistenceGateway — durable single-row snapshot of the press history.

The whole history lives in one row of ``button_snapshots``, keyed by a
fixed name, as a JSON array of PressEvents.  Every save overwrites it.

Design notes:
    - SQLAlchemy calls are blocking; the async API runs them on the loop's
      default executor.
    - Every save request gets a generation number when it is *requested*.
      Writes are serialized by a thread lock and a write whose generation
      is older than the last one written is skipped, so a slow background
      save can never clobber a newer snapshot (including the shutdown one).
    - Failures are logged and reported as ``False``/empty, never raised.
      The in-memory store stays authoritative.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import itertools
import logging
import threading
from typing import Callable, Iterable, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import (
    Column,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.engine.interfaces import ExceptionContext
from sqlalchemy.exc import SQLAlchemyError

from button_monitor.domain.press import PressEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")

metadata = MetaData()

snapshots_table = Table(
    "button_snapshots",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("entries", Text, nullable=False),
)

_EVENT_LIST = TypeAdapter(list[PressEvent])


def create_snapshot_engine(database_url: str) -> Engine:
    """Create the engine for *database_url*.  Does not connect yet."""
    return create_engine(database_url, pool_pre_ping=True, pool_recycle=300)


class PersistenceGateway:
    """Loads and overwrites the persisted history row.

    Args:
        engine: SQLAlchemy engine for the backend.
        key: Primary key of the snapshot row.
    """

    def __init__(self, engine: Engine, key: str = "entries") -> None:
        self._engine = engine
        self._key = key
        self._schema_ready = False
        self._write_lock = threading.Lock()
        self._generations = itertools.count(1)
        self._written_generation = 0
        self._pending: set[asyncio.Task] = set()
        event.listen(engine, "handle_error", self._on_backend_error)

    @classmethod
    def from_url(cls, database_url: str, key: str = "entries") -> PersistenceGateway:
        return cls(create_snapshot_engine(database_url), key=key)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ── Async API ────────────────────────────────────────────────────────

    async def load(self) -> list[PressEvent]:
        """Read the persisted history.

        Returns an empty list when the backend is unreachable, the row is
        missing (a placeholder row is created) or the payload is corrupt.
        """
        return await self._run(self._load_sync)

    async def save(self, events: Iterable[PressEvent]) -> bool:
        """Overwrite the row with *events*.  Returns False on failure."""
        generation = next(self._generations)
        return await self._run(self._save_sync, tuple(events), generation)

    def schedule_save(self, events: Iterable[PressEvent]) -> None:
        """Fire-and-forget save, tracked so drain() can await it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; snapshot save skipped")
            return
        task = loop.create_task(self.save(events))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every scheduled save to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ── Blocking API (shutdown path) ─────────────────────────────────────

    def save_blocking(self, events: Iterable[PressEvent], timeout: Optional[float] = None) -> bool:
        """Save synchronously, giving up after *timeout* seconds."""
        generation = next(self._generations)
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="snapshot-save"
        )
        try:
            future = executor.submit(self._save_sync, tuple(events), generation)
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            logger.error("Snapshot save did not finish within %.1fs", timeout)
            return False
        finally:
            executor.shutdown(wait=False)

    def dispose(self) -> None:
        self._engine.dispose()

    # ── Internals ────────────────────────────────────────────────────────

    async def _run(self, fn: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            metadata.create_all(self._engine, checkfirst=True)
            self._schema_ready = True

    def _load_sync(self) -> list[PressEvent]:
        try:
            self._ensure_schema()
            with self._engine.begin() as conn:
                row = conn.execute(
                    select(snapshots_table.c.entries).where(snapshots_table.c.key == self._key)
                ).first()
                if row is None:
                    conn.execute(insert(snapshots_table).values(key=self._key, entries="[]"))
                    logger.info("No snapshot row %r; created an empty one", self._key)
                    return []
        except SQLAlchemyError:
            logger.exception("Could not load snapshot; starting with an empty history")
            return []

        try:
            events = _EVENT_LIST.validate_json(row.entries)
        except ValidationError:
            logger.exception("Snapshot row %r is corrupt; starting with an empty history", self._key)
            return []

        logger.info("Loaded %d event(s) from snapshot %r", len(events), self._key)
        return events

    def _save_sync(self, events: tuple[PressEvent, ...], generation: int) -> bool:
        payload = _EVENT_LIST.dump_json(list(events), by_alias=True).decode()
        with self._write_lock:
            if generation < self._written_generation:
                logger.debug("Skipping stale snapshot save (generation %d)", generation)
                return True
            try:
                self._ensure_schema()
                with self._engine.begin() as conn:
                    result = conn.execute(
                        update(snapshots_table)
                        .where(snapshots_table.c.key == self._key)
                        .values(entries=payload)
                    )
                    if result.rowcount == 0:
                        conn.execute(insert(snapshots_table).values(key=self._key, entries=payload))
            except SQLAlchemyError:
                logger.exception("Could not save snapshot (%d event(s))", len(events))
                return False
            self._written_generation = generation
        logger.debug("Saved %d event(s) to snapshot %r", len(events), self._key)
        return True

    def _on_backend_error(self, context: ExceptionContext) -> None:
        if context.is_disconnect:
            logger.warning("Persistence backend disconnected: %s", context.original_exception)
