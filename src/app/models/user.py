from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

if TYPE_CHECKING:
    from app.models import Reservation


class User(Base):
    """Таблица клиентов, оформляющих резервы."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(length=320),
        unique=True,
        index=True,
        nullable=False,
    )
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    reservations: Mapped[List['Reservation']] = relationship(
        back_populates='user',
        lazy='raise',
        passive_deletes=True,
    )
