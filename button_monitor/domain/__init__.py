from button_monitor.domain.enums import FrameType, PressCategory
from button_monitor.domain.press import PressEvent, categorize
from button_monitor.domain.tick import StreamFrame, TickPayload, TickSample

__all__ = [
    "FrameType",
    "PressCategory",
    "PressEvent",
    "categorize",
    "StreamFrame",
    "TickPayload",
    "TickSample",
]
