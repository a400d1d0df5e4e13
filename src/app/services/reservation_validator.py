from datetime import date, time
from typing import Iterable, NamedTuple, Optional, Protocol

from app.utils.enums import RejectReason, Weekday
from app.utils.intervals import TimeInterval, optional_interval

REJECT_MESSAGES = {
    RejectReason.AGENDA_UNAVAILABLE: 'Агенда недоступна',
    RejectReason.DATE_OUT_OF_RANGE: 'Дата резерва вне диапазона агенды',
    RejectReason.DAY_NOT_ACTIVE: 'Выбранный день недоступен в агенде',
    RejectReason.OUTSIDE_WORKING_HOURS: 'Время вне рабочего окна агенды',
    RejectReason.OVERLAPS_BREAK: 'Время пересекается с перерывом',
    RejectReason.SLOT_TAKEN: 'На это время уже есть резерв',
}
REJECT_FIELDS = {
    RejectReason.AGENDA_UNAVAILABLE: 'agenda_id',
    RejectReason.DATE_OUT_OF_RANGE: 'date_reserved',
    RejectReason.DAY_NOT_ACTIVE: 'date_reserved',
    RejectReason.OUTSIDE_WORKING_HOURS: 'time_start',
    RejectReason.OVERLAPS_BREAK: 'time_start',
    RejectReason.SLOT_TAKEN: 'time_start',
}


class AgendaRules(Protocol):
    """Поля агенды, которые нужны проверке резерва."""

    is_active: bool
    date_start: date
    date_end: date
    work_start: time
    work_end: time
    active_weekdays: list[int]
    break_start: Optional[time]
    break_end: Optional[time]


class BookedInterval(Protocol):
    """Уже сохранённый резерв того же дня."""

    time_start: time
    time_end: time


class Rejection(NamedTuple):
    """Отказ в резерве: причина, поле и читаемое сообщение."""

    reason: RejectReason
    field: str
    message: str

    @classmethod
    def of(cls, reason: RejectReason) -> 'Rejection':
        return cls(reason, REJECT_FIELDS[reason], REJECT_MESSAGES[reason])


def touches_break(candidate: TimeInterval, rest: TimeInterval) -> bool:
    """Задевает ли резерв перерыв хоть как-то.

    В отличие от генерации слотов здесь ничего не укорачивается:
    начало внутри перерыва, конец внутри перерыва (включая правую
    границу) или охват перерыва целиком означает отказ.
    """
    starts_inside = rest.start <= candidate.start < rest.end
    ends_inside = rest.start < candidate.end <= rest.end
    straddles = candidate.start < rest.start and candidate.end > rest.end
    return starts_inside or ends_inside or straddles


def check_reservation(
    agenda: Optional[AgendaRules],
    day: date,
    time_start: time,
    time_end: time,
    siblings: Iterable[BookedInterval] = (),
) -> Optional[Rejection]:
    """Проверяет резерв по правилам агенды, до первого нарушения.

    Args:
        agenda: агенда резерва или None, если она не найдена
        day: дата резерва
        time_start: начало резерва
        time_end: конец резерва
        siblings: неотменённые резервы той же агенды на ту же дату

    Returns:
        Optional[Rejection]: None, если резерв допустим

    """
    if agenda is None or not agenda.is_active:
        return Rejection.of(RejectReason.AGENDA_UNAVAILABLE)
    if not agenda.date_start <= day <= agenda.date_end:
        return Rejection.of(RejectReason.DATE_OUT_OF_RANGE)
    if Weekday.of(day) not in {Weekday(d) for d in agenda.active_weekdays}:
        return Rejection.of(RejectReason.DAY_NOT_ACTIVE)

    candidate = TimeInterval.from_times(time_start, time_end)
    work = TimeInterval.from_times(agenda.work_start, agenda.work_end)
    if candidate.start < work.start or candidate.end > work.end:
        return Rejection.of(RejectReason.OUTSIDE_WORKING_HOURS)

    rest = optional_interval(agenda.break_start, agenda.break_end)
    if rest is not None and touches_break(candidate, rest):
        return Rejection.of(RejectReason.OVERLAPS_BREAK)

    for sibling in siblings:
        booked = TimeInterval.from_times(sibling.time_start, sibling.time_end)
        if candidate.overlaps(booked):
            return Rejection.of(RejectReason.SLOT_TAKEN)
    return None
