from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from app.utils.enums import ReservationState
from app.utils.validators import (
    check_time_window,
    join_errors,
    normalize_text,
    normalize_time,
)

Price = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class ReservationCreate(BaseModel):
    """Схема для создания резерва."""

    user_id: UUID
    service_id: UUID
    agenda_id: UUID
    date_reserved: date
    time_start: time
    time_end: time
    state: ReservationState = ReservationState.PENDING
    notes: Optional[str] = None
    total_price: Price

    @field_validator('time_start', 'time_end')
    @classmethod
    def drop_seconds(cls, value: time) -> time:
        """Приводит время к точности до минуты."""
        return normalize_time(value)

    @field_validator('notes', mode='before')
    @classmethod
    def normalize_notes(cls, value: Optional[str]) -> Optional[str]:
        """Очищает комментарий от лишних пробелов."""
        return normalize_text(value)


class ReservationUpdate(BaseModel):
    """Схема для частичного обновления резерва."""

    user_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    agenda_id: Optional[UUID] = None
    date_reserved: Optional[date] = None
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    state: Optional[ReservationState] = None
    notes: Optional[str] = None
    total_price: Optional[Price] = None

    @field_validator('time_start', 'time_end')
    @classmethod
    def drop_seconds(cls, value: Optional[time]) -> Optional[time]:
        """Приводит время к точности до минуты."""
        return normalize_time(value)

    @field_validator('notes', mode='before')
    @classmethod
    def normalize_notes(cls, value: Optional[str]) -> Optional[str]:
        """Очищает комментарий от лишних пробелов."""
        return normalize_text(value)


class ReservationInfo(BaseModel):
    """Полная схема резерва."""

    id: UUID
    user_id: UUID
    service_id: UUID
    agenda_id: UUID
    date_reserved: date
    time_start: time
    time_end: time
    state: ReservationState
    notes: Optional[str]
    total_price: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReservationAvailabilityCheck(BaseModel):
    """Запрос проверки: свободен ли интервал в агенде на дату."""

    agenda_id: UUID
    date_reserved: date
    time_start: time
    time_end: time

    @field_validator('time_start', 'time_end')
    @classmethod
    def drop_seconds(cls, value: time) -> time:
        """Приводит время к точности до минуты."""
        return normalize_time(value)

    @model_validator(mode='after')
    def check_interval(self) -> 'ReservationAvailabilityCheck':
        """Проверяет, что время начала меньше времени окончания."""
        errors = check_time_window(self.time_start, self.time_end)
        if errors:
            raise ValueError(join_errors(errors))
        return self
