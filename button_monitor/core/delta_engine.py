"""DeltaEngine — turns a stream of counter ticks into PressEvents.

Design notes:
    - The engine holds exactly two values: the previous participant count
      and the previous countdown reading.  Both start out unset.
    - One engine belongs to one stream session.  A reconnect gets a fresh
      engine, so the first tick after a reconnect never produces an event
      against the previous connection's counter.
    - A jump is attributed to the *previous* tick's countdown value: the
      press happened while that value was on screen.
    - Decreases and repeats are not presses.  State is still advanced.
    - Malformed counters are dropped and logged; state is left untouched.
"""

from __future__ import annotations

import logging
from typing import Optional

from button_monitor.domain.press import PressEvent
from button_monitor.domain.tick import TickSample

logger = logging.getLogger(__name__)

_THOUSANDS_SEPARATORS = (",", " ", "\u00a0")


class MalformedSampleError(ValueError):
    """Raised when a participants_text value is not a separated integer."""


def parse_participants(text: str) -> int:
    """Parse a participant total such as ``"608,802"`` into an int.

    Raises:
        MalformedSampleError: If anything other than digits and thousands
            separators is present.
    """
    digits = text.strip()
    for sep in _THOUSANDS_SEPARATORS:
        digits = digits.replace(sep, "")
    if not digits.isdecimal():
        raise MalformedSampleError(f"unparseable participants_text: {text!r}")
    return int(digits)


class DeltaEngine:
    """Stateful tick-to-press transformer for a single stream session."""

    def __init__(self) -> None:
        self._previous_participants: Optional[int] = None
        self._previous_seconds_left: Optional[float] = None

    @property
    def previous_participants(self) -> Optional[int]:
        return self._previous_participants

    @property
    def previous_seconds_left(self) -> Optional[float]:
        return self._previous_seconds_left

    def on_sample(self, sample: TickSample) -> Optional[PressEvent]:
        """Consume one tick and return a PressEvent if the counter jumped."""
        try:
            current = parse_participants(sample.participants_text)
        except MalformedSampleError as exc:
            logger.warning("Dropping tick: %s", exc)
            return None

        event: Optional[PressEvent] = None
        previous = self._previous_participants
        if previous is not None and current > previous:
            event = PressEvent.create(
                seconds_left_at_trigger=self._previous_seconds_left,
                press_count=current - previous,
            )
            logger.debug(
                "Press x%d at %.2fs (%s)",
                event.press_count,
                event.seconds_left_at_trigger,
                event.category.value,
            )

        self._previous_participants = current
        self._previous_seconds_left = sample.seconds_left
        return event
