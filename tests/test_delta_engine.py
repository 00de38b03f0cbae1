"""Tests for the DeltaEngine and participant parsing."""

import pytest

from button_monitor.core.delta_engine import (
    DeltaEngine,
    MalformedSampleError,
    parse_participants,
)
from button_monitor.domain.enums import PressCategory
from button_monitor.domain.tick import TickSample


def _tick(participants: str, seconds_left: float = 60.0) -> TickSample:
    return TickSample(participants_text=participants, seconds_left=seconds_left)


class TestParseParticipants:
    def test_strips_thousands_separators(self) -> None:
        assert parse_participants("608,802") == 608802

    def test_plain_digits(self) -> None:
        assert parse_participants("100") == 100

    def test_surrounding_whitespace(self) -> None:
        assert parse_participants(" 1,000 ") == 1000

    @pytest.mark.parametrize("text", ["", "abc", "12a", "-5", "1.5"])
    def test_malformed_rejected(self, text: str) -> None:
        with pytest.raises(MalformedSampleError):
            parse_participants(text)


class TestDeltaEngine:
    def test_first_sample_emits_nothing(self) -> None:
        engine = DeltaEngine()
        assert engine.on_sample(_tick("100", 55)) is None
        assert engine.previous_participants == 100
        assert engine.previous_seconds_left == 55

    def test_jump_uses_previous_countdown(self) -> None:
        engine = DeltaEngine()
        engine.on_sample(_tick("100", 55))
        press = engine.on_sample(_tick("150", 40))
        assert press is not None
        assert press.press_count == 50
        assert press.seconds_left_at_trigger == 55
        assert press.category == PressCategory.PRESS_6

    def test_strictly_increasing_sequence(self) -> None:
        engine = DeltaEngine()
        counts = [10, 11, 15, 100, 1000, 1001]
        presses = [engine.on_sample(_tick(f"{c:,}", 30.0)) for c in counts]
        assert presses[0] is None
        assert [p.press_count for p in presses[1:]] == [1, 4, 85, 900, 1]

    def test_non_increasing_emits_nothing_but_updates_state(self) -> None:
        engine = DeltaEngine()
        results = [
            engine.on_sample(_tick("500", 50)),
            engine.on_sample(_tick("500", 49)),
            engine.on_sample(_tick("480", 48)),
        ]
        assert results == [None, None, None]
        assert engine.previous_participants == 480
        assert engine.previous_seconds_left == 48

    def test_increase_after_decrease_measured_from_latest(self) -> None:
        engine = DeltaEngine()
        engine.on_sample(_tick("500", 50))
        engine.on_sample(_tick("480", 20))
        press = engine.on_sample(_tick("490", 10))
        assert press.press_count == 10
        assert press.seconds_left_at_trigger == 20
        assert press.category == PressCategory.PRESS_2

    def test_zero_previous_count_still_counts(self) -> None:
        engine = DeltaEngine()
        engine.on_sample(_tick("0", 60))
        press = engine.on_sample(_tick("3", 59))
        assert press.press_count == 3

    def test_malformed_sample_dropped_and_state_kept(self) -> None:
        engine = DeltaEngine()
        engine.on_sample(_tick("100", 55))
        assert engine.on_sample(_tick("n/a", 10)) is None
        assert engine.previous_participants == 100
        assert engine.previous_seconds_left == 55
        press = engine.on_sample(_tick("101", 9))
        assert press.press_count == 1
        assert press.seconds_left_at_trigger == 55
