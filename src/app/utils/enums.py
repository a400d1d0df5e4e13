from datetime import date
from enum import Enum, IntEnum


class ReservationState(str, Enum):
    """Enum класс для статусов резервов."""

    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class Weekday(IntEnum):
    """Дни недели в нумерации ISO: 1 = понедельник, 7 = воскресенье."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    @classmethod
    def of(cls, day: date) -> 'Weekday':
        """Возвращает день недели для календарной даты."""
        return cls(day.isoweekday())


class RejectReason(str, Enum):
    """Причины отказа в резервировании интервала."""

    AGENDA_UNAVAILABLE = 'agenda_unavailable'
    DATE_OUT_OF_RANGE = 'date_out_of_range'
    DAY_NOT_ACTIVE = 'day_not_active'
    OUTSIDE_WORKING_HOURS = 'outside_working_hours'
    OVERLAPS_BREAK = 'overlaps_break'
    SLOT_TAKEN = 'slot_taken'
