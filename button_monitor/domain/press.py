"""PressEvent — one observed jump in the participant counter.

A press is derived, never received: the stream only reports the running
participant total and the countdown.  When the total goes up between two
ticks, somebody pressed the button while the countdown showed the value of
the earlier tick.  Several presses landing inside one tick collapse into a
single event whose ``press_count`` is the size of the jump.

Immutable after creation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, PositiveInt
from pydantic.alias_generators import to_camel

from button_monitor.domain.enums import PressCategory
from button_monitor.foundation.clock import epoch_millis


# ── Bucketing ────────────────────────────────────────────────────────────────

_THRESHOLDS: tuple[tuple[float, PressCategory], ...] = (
    (51, PressCategory.PRESS_6),
    (41, PressCategory.PRESS_5),
    (31, PressCategory.PRESS_4),
    (21, PressCategory.PRESS_3),
    (11, PressCategory.PRESS_2),
)


def categorize(seconds: float) -> PressCategory:
    """Map a countdown value to its flair bucket.

    Lower bounds are exclusive: 51.0 is PRESS_5, 51.01 is PRESS_6.
    Anything at or below 11 seconds is PRESS_1.
    """
    for lower_bound, category in _THRESHOLDS:
        if seconds > lower_bound:
            return category
    return PressCategory.PRESS_1


# ── PressEvent ───────────────────────────────────────────────────────────────

class PressEvent(BaseModel):
    """A qualifying increase in participants, as served by the query surface.

    Serialized with camelCase keys (``secondsLeftAtTrigger``, ``timestamp``,
    ``category``, ``pressCount``); both the field names and the aliases are
    accepted on input.
    """

    seconds_left_at_trigger: float = Field(
        ...,
        ge=0,
        le=60,
        allow_inf_nan=False,
        description="Countdown reading of the tick that preceded the jump",
    )
    timestamp: int = Field(..., description="Creation time, milliseconds since epoch")
    category: PressCategory = Field(..., description="Flair bucket of seconds_left_at_trigger")
    press_count: PositiveInt = Field(..., description="Size of the participant jump")

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @classmethod
    def create(cls, seconds_left_at_trigger: float, press_count: int) -> PressEvent:
        """Build an event stamped with the current time and its derived bucket."""
        return cls(
            seconds_left_at_trigger=seconds_left_at_trigger,
            timestamp=epoch_millis(),
            category=categorize(seconds_left_at_trigger),
            press_count=press_count,
        )

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
