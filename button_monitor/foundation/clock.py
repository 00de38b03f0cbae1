"""Timezone-aware clock utilities.

This module is the single source of "now" so tests can monkey-patch it
trivially.  Press timestamps are integer milliseconds since the epoch.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    """Return the current time as whole milliseconds since the Unix epoch."""
    return int(utc_now().timestamp() * 1000)
