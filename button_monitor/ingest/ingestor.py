"""ButtonIngestor — keeps exactly one stream session alive.

Cycle:

    resolve()  →  StreamSession(url).run()  →  (closed)  →  resolve()  → ...

Sessions run one after another inside a single task, so two sessions can
never be open at the same time.  Each session is built with its own
DeltaEngine; counter state does not survive a reconnect.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from button_monitor.domain.press import PressEvent
from button_monitor.ingest.resolver import EndpointResolver
from button_monitor.ingest.session import PressCallback, StreamSession
from button_monitor.store.event_store import EventStore

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str, PressCallback], StreamSession]


class ButtonIngestor:
    """Supervises the resolve → stream → re-resolve loop.

    Args:
        resolver: Finds the current stream endpoint.
        store: Receives every PressEvent the sessions derive.
        session_factory: Builds a session for an endpoint; defaults to a
            StreamSession with a fresh DeltaEngine.
    """

    def __init__(
        self,
        resolver: EndpointResolver,
        store: EventStore,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._session_factory = session_factory or StreamSession
        self._session: Optional[StreamSession] = None
        self._task: Optional[asyncio.Task] = None
        self.sessions_opened = 0

    @property
    def current_endpoint(self) -> Optional[str]:
        if self._session is None or self._session.closed:
            return None
        return self._session.endpoint

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self.run())
        self._task.add_done_callback(self._on_task_done)
        logger.info("Ingestor started")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        # Failures other than cancellation were logged by _on_task_done.
        await asyncio.gather(task, return_exceptions=True)
        logger.info("Ingestor stopped")

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Ingestor loop died unexpectedly", exc_info=exc)

    # ── Loop ─────────────────────────────────────────────────────────────

    async def run(self, max_sessions: Optional[int] = None) -> None:
        """Resolve and stream forever, or for *max_sessions* sessions."""
        while max_sessions is None or self.sessions_opened < max_sessions:
            endpoint = await self._resolver.resolve()
            self._session = self._session_factory(endpoint, self._on_press)
            self.sessions_opened += 1
            await self._session.run()
            logger.info("Stream closed. Searching for a new URL...")

    def _on_press(self, press: PressEvent) -> None:
        self._store.append(press)
