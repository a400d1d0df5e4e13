from datetime import date, datetime, time
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from app.core.constants import INTERVAL_MIN_MINUTES
from app.schemas.slot import SlotInfo
from app.utils.enums import Weekday
from app.utils.validators import (
    check_date_range,
    join_errors,
    normalize_text,
    normalize_time,
)

IntervalMinutes = Annotated[int, Field(ge=INTERVAL_MIN_MINUTES)]
TIME_FIELDS = ('work_start', 'work_end', 'break_start', 'break_end')


class AgendaBase(BaseModel):
    """Базовая схема агенды с общими полями.

    Согласованность дат, рабочего окна и перерыва проверяет сервис, чтобы
    ошибки возвращались по полям.
    """

    service_id: UUID
    date_start: date
    date_end: date
    work_start: time
    work_end: time
    interval_minutes: IntervalMinutes = 30
    active_weekdays: Annotated[set[Weekday], Field(min_length=1)]
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    auto_generate_slots: bool = True
    notes: Optional[str] = None

    @field_validator(*TIME_FIELDS)
    @classmethod
    def drop_seconds(cls, value: Optional[time]) -> Optional[time]:
        """Приводит время к точности до минуты."""
        return normalize_time(value)

    @field_validator('notes', mode='before')
    @classmethod
    def normalize_notes(cls, value: Optional[str]) -> Optional[str]:
        """Очищает заметки от лишних пробелов."""
        return normalize_text(value)


class AgendaCreate(AgendaBase):
    """Схема для создания агенды."""

    is_active: bool = True


class AgendaUpdate(BaseModel):
    """Схема для частичного обновления агенды.

    Согласованность полей проверяется сервисом после слияния с
    сохранёнными значениями.
    """

    service_id: Optional[UUID] = None
    date_start: Optional[date] = None
    date_end: Optional[date] = None
    work_start: Optional[time] = None
    work_end: Optional[time] = None
    interval_minutes: Optional[IntervalMinutes] = None
    active_weekdays: Optional[
        Annotated[set[Weekday], Field(min_length=1)]
    ] = None
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    auto_generate_slots: Optional[bool] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator(*TIME_FIELDS)
    @classmethod
    def drop_seconds(cls, value: Optional[time]) -> Optional[time]:
        """Приводит время к точности до минуты."""
        return normalize_time(value)

    @field_validator('notes', mode='before')
    @classmethod
    def normalize_notes(cls, value: Optional[str]) -> Optional[str]:
        """Очищает заметки от лишних пробелов."""
        return normalize_text(value)


class AgendaInfo(BaseModel):
    """Полная схема агенды."""

    id: UUID
    service_id: UUID
    date_start: date
    date_end: date
    work_start: time
    work_end: time
    interval_minutes: int
    active_weekdays: list[Weekday]
    break_start: Optional[time]
    break_end: Optional[time]
    auto_generate_slots: bool
    notes: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('active_weekdays')
    def sort_weekdays(self, value: list[Weekday]) -> list[int]:
        """Отдаёт дни недели по порядку, без повторов."""
        return sorted({int(day) for day in value})


class AgendaWithSlots(AgendaInfo):
    """Агенда вместе со слотами на запрошенную дату."""

    slots_date: date
    slots: list[SlotInfo]
    slots_message: Optional[str] = None


class AgendaAvailabilityCheck(BaseModel):
    """Запрос проверки: свободен ли диапазон дат для новой агенды услуги."""

    service_id: UUID
    date_start: date
    date_end: date

    @model_validator(mode='after')
    def check_range(self) -> 'AgendaAvailabilityCheck':
        """Проверяет, что диапазон дат не перевёрнут."""
        errors = check_date_range(self.date_start, self.date_end)
        if errors:
            raise ValueError(join_errors(errors))
        return self
