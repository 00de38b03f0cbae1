"""Bounded, insertion-ordered in-memory history of PressEvents.

Design notes:
    - The store is the only owner of the history.  Callers mutate it through
      append() and read it through snapshot(); the live list never leaves.
    - Capacity is enforced on every append by dropping from the front, so
      the store always holds the most recently appended N events in their
      original relative order.  Eviction is by insertion order, not by
      timestamp.
    - All access happens on the event loop thread, so there is no lock.
    - Persistence is a listener: after each append the store hands the new
      snapshot to ``on_append``.  What the listener does with it (and
      whether it fails) never affects the in-memory state.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from button_monitor.domain.press import PressEvent

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[tuple[PressEvent, ...]], None]


class EventStore:
    """Capacity-limited FIFO of PressEvents.

    Args:
        capacity: Maximum number of events retained.
        on_append: Optional listener invoked with the full snapshot after
            every append.  Exceptions it raises are logged and swallowed.
    """

    def __init__(
        self,
        capacity: int = 1000,
        on_append: Optional[SnapshotListener] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._on_append = on_append
        self._events: list[PressEvent] = []

    # ── Public API ───────────────────────────────────────────────────────

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._events)

    def set_listener(self, on_append: Optional[SnapshotListener]) -> None:
        self._on_append = on_append

    def seed(self, events: Iterable[PressEvent]) -> None:
        """Replace the contents with *events* without notifying the listener.

        Used once at boot with the persisted history.  Oversized histories
        are trimmed to the most recent ``capacity`` entries.
        """
        loaded = list(events)
        self._events = loaded[-self._capacity:]
        if len(loaded) > self._capacity:
            logger.info(
                "Seed trimmed from %d to %d event(s)", len(loaded), self._capacity
            )

    def append(self, event: PressEvent) -> None:
        """Add *event* at the end, evicting the oldest entries past capacity."""
        self._events.append(event)
        overflow = len(self._events) - self._capacity
        if overflow > 0:
            del self._events[:overflow]

        if self._on_append is not None:
            try:
                self._on_append(self.snapshot())
            except Exception:
                logger.exception("Snapshot listener failed; in-memory append kept")

    def snapshot(self) -> tuple[PressEvent, ...]:
        """Return an immutable copy of the history, oldest first."""
        return tuple(self._events)
