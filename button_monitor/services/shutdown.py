"""ShutdownGuard — final synchronous save on termination signals.

On SIGINT, SIGTERM or SIGHUP the guard writes the current history to the
persistence backend (bounded by a timeout), restores the default handler
for that signal and raises it again, so the process still ends the way
the signal asked it to.
"""

from __future__ import annotations

import logging
import signal
import threading
from typing import Callable, Iterable, Optional

from button_monitor.domain.press import PressEvent
from button_monitor.store.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = tuple(
    sig
    for sig in (
        getattr(signal, "SIGINT", None),
        getattr(signal, "SIGTERM", None),
        getattr(signal, "SIGHUP", None),
    )
    if sig is not None
)


class ShutdownGuard:
    """Saves a snapshot once, then re-raises the terminating signal.

    Args:
        gateway: Where the final snapshot goes.
        snapshot: Returns the events to save (usually ``store.snapshot``).
        timeout: Upper bound in seconds for the final save.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        snapshot: Callable[[], Iterable[PressEvent]],
        timeout: float = 10.0,
    ) -> None:
        self._gateway = gateway
        self._snapshot = snapshot
        self._timeout = timeout
        self._lock = threading.Lock()
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def install(self, signals: Iterable[signal.Signals] = DEFAULT_SIGNALS) -> None:
        for sig in signals:
            signal.signal(sig, self.handle_signal)
        logger.debug("Shutdown guard installed")

    def handle_signal(self, signum: int, frame: Optional[object] = None) -> None:
        with self._lock:
            first = not self._fired
            self._fired = True

        if first:
            name = signal.Signals(signum).name
            logger.info("Received %s; saving snapshot before exit", name)
            if self._gateway.save_blocking(self._snapshot(), timeout=self._timeout):
                logger.info("Final snapshot saved")
            else:
                logger.error("Final snapshot save failed; exiting anyway")

        signal.signal(signum, signal.SIG_DFL)
        signal.raise_signal(signum)
