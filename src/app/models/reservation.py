import uuid
from datetime import date, time
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Numeric,
    Text,
    Time,
)
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.utils.enums import ReservationState
from app.utils.intervals import TimeInterval

if TYPE_CHECKING:
    from app.models import Agenda, Service, User


class Reservation(Base):
    """Таблица резервов клиентов по агенде."""

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('user.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('service.id', ondelete='CASCADE'),
        nullable=False,
    )
    agenda_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('agenda.id', ondelete='CASCADE'),
        nullable=False,
    )
    date_reserved: Mapped[date] = mapped_column(Date, nullable=False)
    time_start: Mapped[time] = mapped_column(Time, nullable=False)
    time_end: Mapped[time] = mapped_column(Time, nullable=False)
    state: Mapped[ReservationState] = mapped_column(
        ENUM(
            ReservationState,
            name='reservation_state',
            create_type=True,
            values_callable=lambda states: [state.value for state in states],
        ),
        nullable=False,
        server_default=ReservationState.PENDING.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )

    user: Mapped['User'] = relationship(
        back_populates='reservations',
        lazy='selectin',
    )
    service: Mapped['Service'] = relationship(lazy='selectin')
    agenda: Mapped['Agenda'] = relationship(lazy='selectin')

    __table_args__ = (
        CheckConstraint('time_start < time_end', name='time_window'),
        CheckConstraint('total_price >= 0', name='price_not_negative'),
        Index('ix_reservation_agenda_day', 'agenda_id', 'date_reserved'),
        Index('ix_reservation_day_start', 'date_reserved', 'time_start'),
        Index('ix_reservation_service_day', 'service_id', 'date_reserved'),
    )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.from_times(self.time_start, self.time_end)
