import uuid
from datetime import date, time
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    Text,
    Time,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.utils.enums import Weekday

if TYPE_CHECKING:
    from app.models import Service


class Agenda(Base):
    """Таблица агенд: недельный шаблон доступности услуги."""

    service_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('service.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    date_start: Mapped[date] = mapped_column(Date, nullable=False)
    date_end: Mapped[date] = mapped_column(Date, nullable=False)
    work_start: Mapped[time] = mapped_column(Time, nullable=False)
    work_end: Mapped[time] = mapped_column(Time, nullable=False)
    interval_minutes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text('30'),
    )
    active_weekdays: Mapped[list[int]] = mapped_column(
        ARRAY(SmallInteger),
        nullable=False,
    )
    break_start: Mapped[time | None] = mapped_column(Time, nullable=True)
    break_end: Mapped[time | None] = mapped_column(Time, nullable=True)
    auto_generate_slots: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text('true'),
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    service: Mapped['Service'] = relationship(
        back_populates='agendas',
        lazy='selectin',
    )

    __table_args__ = (
        CheckConstraint('date_start <= date_end', name='date_range'),
        CheckConstraint('work_start < work_end', name='work_window'),
        CheckConstraint('interval_minutes >= 1', name='interval_positive'),
        CheckConstraint(
            '(break_start IS NULL) = (break_end IS NULL)',
            name='break_pair',
        ),
        CheckConstraint(
            'break_start IS NULL OR (work_start <= break_start '
            'AND break_start < break_end AND break_end <= work_end)',
            name='break_inside_work',
        ),
        Index('ix_agenda_service_dates', 'service_id', 'date_start', 'date_end'),
    )

    @property
    def weekdays(self) -> frozenset[Weekday]:
        return frozenset(Weekday(day) for day in self.active_weekdays)

    def covers(self, day: date) -> bool:
        """Попадает ли дата в диапазон действия агенды (включительно)."""
        return self.date_start <= day <= self.date_end
