import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

if TYPE_CHECKING:
    from app.models import Agenda, Business


class Service(Base):
    """Таблица услуг бизнеса."""

    business_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('business.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    business: Mapped['Business'] = relationship(
        back_populates='services',
        lazy='selectin',
    )
    agendas: Mapped[List['Agenda']] = relationship(
        back_populates='service',
        lazy='raise',
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint('business_id', 'name', name='service_name_per_business'),
        CheckConstraint('duration >= 1', name='duration_positive'),
        CheckConstraint('price >= 0', name='price_not_negative'),
    )
