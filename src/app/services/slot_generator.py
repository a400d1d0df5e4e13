"""Генерация слотов агенды на один день.

Курсор идёт от начала рабочего окна с шагом ``interval_minutes``:

1. Курсор внутри перерыва ``[break_start, break_end)``: переносится на
   конец перерыва, слот не выдаётся.
2. Предварительный конец слота за пределами рабочего окна: генерация
   заканчивается, неполный хвост не выдаётся.
3. Слот, заходящий на начало перерыва, укорачивается до ``break_start``.
4. Слот выдаётся вместе с флагом ``available`` от предиката ``is_free``.
5. После укороченного слота курсор прыгает на ``break_end``, иначе на
   конец выданного слота.

Функция чистая: результат зависит только от аргументов.
"""

from datetime import time
from typing import Callable, Iterator, NamedTuple, Optional

from loguru import logger

from app.core.constants import INTERVAL_MIN_MINUTES
from app.utils.intervals import TimeInterval, optional_interval

FreePredicate = Callable[[time, time], bool]


class GeneratedSlot(NamedTuple):
    """Слот ``[start, end)`` и его доступность."""

    start: time
    end: time
    available: bool


def _always_free(start: time, end: time) -> bool:
    return True


def iter_slot_intervals(
    work: TimeInterval,
    interval_minutes: int,
    rest: Optional[TimeInterval] = None,
) -> Iterator[TimeInterval]:
    """Выдаёт интервалы слотов в минутах, раньше идущие первыми."""
    if interval_minutes < INTERVAL_MIN_MINUTES:
        raise ValueError(f'Некорректный интервал: {interval_minutes}')
    if rest is not None and rest.start >= rest.end:
        raise ValueError(f'Некорректный перерыв: {rest.start}-{rest.end}')
    cursor = work.start
    while cursor < work.end:
        if rest is not None and rest.contains(cursor):
            cursor = rest.end
            continue

        slot = TimeInterval(cursor, cursor + interval_minutes)
        if slot.end > work.end:
            break

        truncated = (
            rest is not None
            and slot.end > rest.start
            and cursor < rest.start
        )
        if truncated:
            slot = slot.clamp_end(rest.start)

        if slot.duration > 0:
            yield slot

        cursor = rest.end if truncated else slot.end


def generate_slots(
    work_start: time,
    work_end: time,
    interval_minutes: int,
    break_start: Optional[time] = None,
    break_end: Optional[time] = None,
    is_free: Optional[FreePredicate] = None,
) -> list[GeneratedSlot]:
    """Строит упорядоченный список слотов дня.

    Args:
        work_start: начало рабочего окна
        work_end: конец рабочего окна
        interval_minutes: шаг слотов в минутах (>= 1)
        break_start: начало перерыва (или None)
        break_end: конец перерыва (или None)
        is_free: предикат доступности слота; по умолчанию все свободны

    Returns:
        list[GeneratedSlot]: слоты по возрастанию начала. Пустой список
        при внутренней ошибке: пустой результат означает «нет слотов»,
        а не сигнал об ошибке.

    """
    check = is_free or _always_free
    try:
        work = TimeInterval.from_times(work_start, work_end)
        rest = optional_interval(break_start, break_end)
        return [
            GeneratedSlot(
                slot.start_time,
                slot.end_time,
                check(slot.start_time, slot.end_time),
            )
            for slot in iter_slot_intervals(work, interval_minutes, rest)
        ]
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f'Не удалось сгенерировать слоты: {e}')
        return []
