"""Controlled enumerations for the button-monitor domain."""

from __future__ import annotations

from enum import Enum


class PressCategory(str, Enum):
    """Flair bucket a press falls into, by the countdown value it was made at.

    Buckets are ordered: PRESS_6 is the most impatient (> 51 s left),
    PRESS_1 the most patient (<= 11 s left).
    """

    PRESS_1 = "flair-press-1"
    PRESS_2 = "flair-press-2"
    PRESS_3 = "flair-press-3"
    PRESS_4 = "flair-press-4"
    PRESS_5 = "flair-press-5"
    PRESS_6 = "flair-press-6"

    @property
    def rank(self) -> int:
        return int(self.value.rsplit("-", 1)[1])


class FrameType(str, Enum):
    """Frame discriminators the stream is known to send."""

    TICKING = "ticking"
