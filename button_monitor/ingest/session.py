"""StreamSession — one websocket connection to the tick stream.

Path of a frame:

    raw text  →  StreamFrame  →  (type == "ticking")  →  TickSample
              →  DeltaEngine  →  PressEvent  →  on_press callback

A session never reconnects by itself.  run() returns when the connection
ends for any reason, and the caller decides what happens next.  Once a
session has ended it ignores any frame still handed to it, so a draining
connection can never touch a newer session's state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException
from pydantic import ValidationError

from button_monitor.core.delta_engine import DeltaEngine
from button_monitor.domain.press import PressEvent
from button_monitor.domain.tick import StreamFrame, TickSample

logger = logging.getLogger(__name__)

PressCallback = Callable[[PressEvent], None]


class StreamSession:
    """Consumes one stream connection and emits presses.

    Args:
        endpoint: ``wss://`` URL returned by the resolver.
        on_press: Called with every PressEvent the engine derives.
        engine: DeltaEngine owned by this session (fresh one by default).
        connect: Connection factory, ``websockets.connect`` unless injected.
    """

    def __init__(
        self,
        endpoint: str,
        on_press: PressCallback,
        engine: Optional[DeltaEngine] = None,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        self.endpoint = endpoint
        self._on_press = on_press
        self._engine = engine or DeltaEngine()
        self._connect = connect
        self._closed = False
        self.frames_received = 0
        self.presses_emitted = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def engine(self) -> DeltaEngine:
        return self._engine

    async def run(self) -> None:
        """Read frames until the connection closes or fails."""
        logger.info("Setting up stream connection to %s...", self.endpoint)
        try:
            async with self._connect(self.endpoint) as connection:
                logger.info("Listening to stream messages.")
                async for raw in connection:
                    self.handle_message(raw)
        except ConnectionClosed as exc:
            logger.warning("Stream connection lost: %s", exc)
        except (WebSocketException, OSError, asyncio.TimeoutError) as exc:
            logger.warning("Stream connection failed: %s", exc)
        finally:
            self._closed = True
            logger.info(
                "Stream closed after %d frame(s), %d press event(s).",
                self.frames_received,
                self.presses_emitted,
            )

    def handle_message(self, raw: Union[str, bytes]) -> Optional[PressEvent]:
        """Process one frame.  Returns the PressEvent it produced, if any."""
        if self._closed:
            logger.debug("Ignoring frame for closed session %s", self.endpoint)
            return None
        self.frames_received += 1

        try:
            frame = StreamFrame.model_validate_json(raw)
        except ValidationError:
            logger.debug("Dropping unparseable frame")
            return None

        if not frame.is_tick:
            return None

        try:
            sample = TickSample.from_frame(frame)
        except ValidationError:
            logger.debug("Dropping tick frame with malformed payload")
            return None

        press = self._engine.on_sample(sample)
        if press is not None:
            self.presses_emitted += 1
            self._on_press(press)
        return press
