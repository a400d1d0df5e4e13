"""Тесты генерации слотов."""

from datetime import time

import pytest

from app.services.slot_generator import (
    GeneratedSlot,
    generate_slots,
    iter_slot_intervals,
)
from app.utils.intervals import TimeInterval


def starts(slots: list[GeneratedSlot]) -> list[time]:
    return [slot.start for slot in slots]


def as_intervals(slots: list[GeneratedSlot]) -> list[TimeInterval]:
    return [TimeInterval.from_times(slot.start, slot.end) for slot in slots]


class TestGenerateSlots:
    """Сценарии рабочего дня"""

    def test_morning_without_break(self):
        slots = generate_slots(time(9, 0), time(12, 0), 30)

        assert len(slots) == 6
        assert slots[0] == GeneratedSlot(time(9, 0), time(9, 30), True)
        assert slots[-1] == GeneratedSlot(time(11, 30), time(12, 0), True)
        assert all(slot.end <= time(12, 0) for slot in slots)

    def test_short_break_shifts_next_slot(self):
        slots = generate_slots(
            time(9, 0),
            time(12, 0),
            30,
            break_start=time(10, 0),
            break_end=time(10, 15),
        )

        assert starts(slots) == [
            time(9, 0),
            time(9, 30),
            time(10, 15),
            time(10, 45),
            time(11, 15),
        ]
        assert slots[1] == GeneratedSlot(time(9, 30), time(10, 0), True)
        assert not any(
            time(10, 0) <= slot.start < time(10, 15) for slot in slots
        )

    def test_slot_truncated_at_break(self):
        slots = generate_slots(
            time(9, 0),
            time(11, 0),
            45,
            break_start=time(10, 0),
            break_end=time(10, 15),
        )

        assert slots == [
            GeneratedSlot(time(9, 0), time(9, 45), True),
            GeneratedSlot(time(9, 45), time(10, 0), True),
            GeneratedSlot(time(10, 15), time(11, 0), True),
        ]

    def test_partial_trailing_slot_dropped(self):
        slots = generate_slots(time(9, 0), time(10, 0), 40)

        assert slots == [GeneratedSlot(time(9, 0), time(9, 40), True)]

    def test_break_at_work_start(self):
        slots = generate_slots(
            time(9, 0),
            time(10, 0),
            30,
            break_start=time(9, 0),
            break_end=time(9, 30),
        )

        assert slots == [GeneratedSlot(time(9, 30), time(10, 0), True)]

    def test_availability_predicate(self):
        taken = TimeInterval.from_times(time(9, 15), time(9, 45))

        def is_free(start: time, end: time) -> bool:
            return not TimeInterval.from_times(start, end).overlaps(taken)

        slots = generate_slots(time(9, 0), time(10, 30), 30, is_free=is_free)

        assert [slot.available for slot in slots] == [False, False, True]

    def test_restartable(self):
        first = generate_slots(time(9, 0), time(12, 0), 25)
        second = generate_slots(time(9, 0), time(12, 0), 25)
        assert first == second


class TestGenerateSlotsFailures:
    """Внутренняя ошибка даёт пустой список, а не исключение"""

    @pytest.mark.parametrize('interval', [0, -15])
    def test_bad_interval(self, interval):
        assert generate_slots(time(9, 0), time(12, 0), interval) == []

    def test_bad_time_value(self):
        assert generate_slots('09:00', time(12, 0), 30) == []

    def test_window_longer_than_interval(self):
        assert generate_slots(time(9, 0), time(9, 20), 30) == []

    @pytest.mark.parametrize(
        ('break_start', 'break_end'),
        [(time(10, 15), time(10, 0)), (time(10, 0), time(10, 0))],
    )
    def test_reversed_or_empty_break(self, break_start, break_end):
        assert generate_slots(
            time(9, 0),
            time(12, 0),
            30,
            break_start,
            break_end,
        ) == []

    def test_reversed_break_rejected_before_first_slot(self):
        slots = iter_slot_intervals(
            TimeInterval(540, 720),
            30,
            TimeInterval(615, 600),
        )
        with pytest.raises(ValueError):
            next(slots)


@pytest.mark.parametrize(
    ('work', 'interval', 'rest'),
    [
        ((time(8, 0), time(18, 0)), 30, None),
        ((time(8, 0), time(18, 0)), 45, (time(12, 0), time(13, 0))),
        ((time(9, 0), time(17, 0)), 50, (time(12, 10), time(12, 40))),
        ((time(9, 0), time(17, 0)), 7, (time(9, 3), time(9, 4))),
        ((time(0, 0), time(23, 59)), 60, (time(11, 59), time(12, 1))),
    ],
)
def test_slot_properties(work, interval, rest):
    """Слоты упорядочены, не пересекаются и не выходят за рабочее окно."""
    break_start, break_end = rest or (None, None)
    slots = generate_slots(*work, interval, break_start, break_end)
    intervals = as_intervals(slots)
    window = TimeInterval.from_times(*work)

    assert intervals
    for current, following in zip(intervals, intervals[1:]):
        assert current.start < following.start
        assert current.is_before(following)
    for slot in intervals:
        assert slot.duration > 0
        assert window.start <= slot.start
        assert slot.end <= window.end
    if rest:
        pause = TimeInterval.from_times(*rest)
        assert not any(slot.overlaps(pause) for slot in intervals)
