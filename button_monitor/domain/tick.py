"""Inbound stream frames and the TickSample extracted from them.

Sample tick frame:

    {
        "type": "ticking",
        "payload": {
            "participants_text": "608,802",
            "tick_mac": "50e7a9fd2e4c8feae6851884f91d65908cceb06b",
            "seconds_left": 60.0,
            "now_str": "2015-04-06-04-08-07"
        }
    }

Frames are validated at the boundary; anything that does not parse is
dropped by the session, never repaired.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from button_monitor.domain.enums import FrameType


class StreamFrame(BaseModel):
    """Envelope of every message on the stream."""

    type: str = Field(..., description="Frame discriminator")
    payload: Optional[dict[str, Any]] = None

    @property
    def is_tick(self) -> bool:
        return self.type == FrameType.TICKING.value


class TickPayload(BaseModel):
    """Payload of a ``ticking`` frame.  Unknown keys are ignored."""

    participants_text: str
    seconds_left: float = Field(..., ge=0, le=60, allow_inf_nan=False)


class TickSample(BaseModel):
    """One tick, as handed to the DeltaEngine.  Never retained."""

    participants_text: str
    seconds_left: float = Field(..., ge=0, le=60, allow_inf_nan=False)

    model_config = {"frozen": True}

    @classmethod
    def from_frame(cls, frame: StreamFrame) -> TickSample:
        """Extract a sample from a ticking frame.

        Raises:
            pydantic.ValidationError: If the payload lacks the tick fields.
        """
        tick = TickPayload.model_validate(frame.payload or {})
        return cls(participants_text=tick.participants_text, seconds_left=tick.seconds_left)
