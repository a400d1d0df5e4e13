"""Интервалы настенного времени и предикаты пересечения.

Время внутри движка расписания хранится как число минут от полуночи.
Здесь же живут два разных предиката пересечения:

- ``strict_overlaps``: полуоткрытые интервалы ``[a, b)``, касание
  границами пересечением не считается (слоты и занятость);
- ``range_overlaps``: замкнутые диапазоны ``[a, b]`` с явной проверкой
  вложенности (даты агенд и устаревшие запросы по времени).

Предикаты не взаимозаменяемы: на границах они дают разный ответ.
"""

from datetime import time
from typing import Any, NamedTuple, Optional

MINUTES_IN_HOUR = 60
MINUTES_IN_DAY = 24 * MINUTES_IN_HOUR


def to_minutes(value: time) -> int:
    """Переводит время суток в минуты от полуночи."""
    return value.hour * MINUTES_IN_HOUR + value.minute


def from_minutes(minutes: int) -> time:
    """Переводит минуты от полуночи обратно во время суток."""
    if not 0 <= minutes < MINUTES_IN_DAY:
        raise ValueError(f'Минуты вне суток: {minutes}')
    hours, rest = divmod(minutes, MINUTES_IN_HOUR)
    return time(hours, rest)


def strict_overlaps(a: Any, b: Any, c: Any, d: Any) -> bool:
    """Пересекаются ли полуоткрытые интервалы ``[a, b)`` и ``[c, d)``."""
    return a < d and c < b


def range_overlaps(a: Any, b: Any, c: Any, d: Any) -> bool:
    """Конфликтуют ли замкнутые диапазоны ``[a, b]`` и ``[c, d]``.

    ``[a, b]`` это уже сохранённый диапазон, ``[c, d]`` проверяемый.
    Конфликт, если начало или конец сохранённого лежит внутри
    проверяемого, либо сохранённый целиком его накрывает.
    """
    return c <= a <= d or c <= b <= d or (a <= c and b >= d)


class TimeInterval(NamedTuple):
    """Полуоткрытый интервал ``[start, end)`` в минутах от полуночи."""

    start: int
    end: int

    @classmethod
    def from_times(cls, start: time, end: time) -> 'TimeInterval':
        """Создаёт интервал из значений ``datetime.time``."""
        return cls(to_minutes(start), to_minutes(end))

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> time:
        return from_minutes(self.start)

    @property
    def end_time(self) -> time:
        return from_minutes(self.end)

    def contains(self, point: int) -> bool:
        """Лежит ли минута внутри интервала (правая граница не входит)."""
        return self.start <= point < self.end

    def overlaps(self, other: 'TimeInterval') -> bool:
        return strict_overlaps(self.start, self.end, other.start, other.end)

    def is_before(self, other: 'TimeInterval') -> bool:
        """Заканчивается ли интервал не позже начала другого."""
        return self.end <= other.start

    def clamp_end(self, limit: int) -> 'TimeInterval':
        """Обрезает конец интервала по ``limit``, если он его превышает."""
        return TimeInterval(self.start, min(self.end, limit))


def optional_interval(
    start: Optional[time],
    end: Optional[time],
) -> Optional[TimeInterval]:
    """Интервал перерыва или None, если перерыв не задан."""
    if start is None or end is None:
        return None
    return TimeInterval.from_times(start, end)
