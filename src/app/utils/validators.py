from datetime import date, time
from typing import Iterable, Optional

from app.core.constants import INTERVAL_MIN_MINUTES
from app.utils.enums import Weekday


def normalize_time(value: Optional[time]) -> Optional[time]:
    """Отбрасывает секунды: движок расписания работает в минутах."""
    if value is None:
        return None
    return value.replace(second=0, microsecond=0)


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Очищает строку от лишних пробелов, пустую приводит к None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError('Значение должно быть строкой')
    cleaned = value.strip()
    return cleaned or None


def check_date_range(date_start: date, date_end: date) -> dict[str, str]:
    """Проверяет, что диапазон дат не перевёрнут."""
    if date_start > date_end:
        return {
            'date_end': 'Дата окончания не может быть раньше даты начала',
        }
    return {}


def check_work_window(work_start: time, work_end: time) -> dict[str, str]:
    """Проверяет, что рабочее окно имеет положительную длину."""
    if work_start >= work_end:
        return {
            'work_end': 'Окончание работы должно быть позже начала',
        }
    return {}


def check_break_window(
    work_start: time,
    work_end: time,
    break_start: Optional[time],
    break_end: Optional[time],
) -> dict[str, str]:
    """Проверяет перерыв: оба конца или ни одного, внутри рабочего окна."""
    if break_start is None and break_end is None:
        return {}
    if break_start is None:
        return {'break_start': 'Укажите начало перерыва вместе с окончанием'}
    if break_end is None:
        return {'break_end': 'Укажите окончание перерыва вместе с началом'}
    if break_start >= break_end:
        return {'break_end': 'Окончание перерыва должно быть позже начала'}
    if break_start < work_start or break_end > work_end:
        return {'break_start': 'Перерыв должен быть внутри рабочего времени'}
    return {}


def check_weekdays(weekdays: Iterable[int]) -> dict[str, str]:
    """Проверяет набор активных дней недели (1 = пн, 7 = вс)."""
    days = list(weekdays)
    if not days:
        return {'active_weekdays': 'Укажите хотя бы один активный день'}
    allowed = {day.value for day in Weekday}
    if any(int(day) not in allowed for day in days):
        return {'active_weekdays': 'Дни недели задаются числами от 1 до 7'}
    return {}


def check_interval(interval_minutes: int) -> dict[str, str]:
    """Проверяет шаг слотов."""
    if interval_minutes < INTERVAL_MIN_MINUTES:
        return {
            'interval_minutes': (
                f'Интервал должен быть не меньше {INTERVAL_MIN_MINUTES} мин.'
            ),
        }
    return {}


def check_agenda_rules(
    *,
    date_start: date,
    date_end: date,
    work_start: time,
    work_end: time,
    interval_minutes: int,
    active_weekdays: Iterable[int],
    break_start: Optional[time] = None,
    break_end: Optional[time] = None,
) -> dict[str, str]:
    """Выполняет все проверки шаблона агенды и собирает ошибки по полям."""
    errors: dict[str, str] = {}
    errors.update(check_date_range(date_start, date_end))
    errors.update(check_work_window(work_start, work_end))
    if not errors.get('work_end'):
        errors.update(
            check_break_window(work_start, work_end, break_start, break_end),
        )
    errors.update(check_weekdays(active_weekdays))
    errors.update(check_interval(interval_minutes))
    return errors


def check_time_window(time_start: time, time_end: time) -> dict[str, str]:
    """Проверяет, что интервал резерва имеет положительную длину."""
    if time_start >= time_end:
        return {'time_end': 'Время окончания должно быть позже начала'}
    return {}


def join_errors(errors: dict[str, str]) -> str:
    """Склеивает ошибки по полям в одно сообщение для ValueError."""
    return '; '.join(errors.values())
