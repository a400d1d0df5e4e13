import hashlib
from datetime import date, time
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Reservation
from app.repositories.base import CRUDBase, range_overlap_clause
from app.schemas.reservation import ReservationCreate, ReservationUpdate
from app.utils.enums import ReservationState


def day_lock_key(agenda_id: UUID, day: date) -> int:
    """Ключ advisory-блокировки для пары (агенда, дата) в диапазоне int8."""
    digest = hashlib.blake2b(
        f'{agenda_id}:{day.isoformat()}'.encode(),
        digest_size=8,
    ).digest()
    return int.from_bytes(digest, 'big', signed=True)


class ReservationRepository(
    CRUDBase[Reservation, ReservationCreate, ReservationUpdate],
):
    """Репозиторий для операций с резервами."""

    def __init__(self) -> None:
        """Инициализация репозитория резервов."""
        super().__init__(Reservation)

    async def get_filtered(
        self,
        session: AsyncSession,
        *,
        user_id: Optional[UUID] = None,
        service_id: Optional[UUID] = None,
        agenda_id: Optional[UUID] = None,
        state: Optional[ReservationState] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Reservation]:
        """Получает резервы по фильтрам, самые поздние первыми."""
        conditions = []
        if user_id is not None:
            conditions.append(Reservation.user_id == user_id)
        if service_id is not None:
            conditions.append(Reservation.service_id == service_id)
        if agenda_id is not None:
            conditions.append(Reservation.agenda_id == agenda_id)
        if state is not None:
            conditions.append(Reservation.state == state)
        if date_from is not None:
            conditions.append(Reservation.date_reserved >= date_from)
        if date_to is not None:
            conditions.append(Reservation.date_reserved <= date_to)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=[
                Reservation.date_reserved.desc(),
                Reservation.time_start.desc(),
            ],
        )

    async def get_day_reservations(
        self,
        session: AsyncSession,
        agenda_id: UUID,
        day: date,
        exclude_id: Optional[UUID] = None,
    ) -> List[Reservation]:
        """Неотменённые резервы агенды на дату, по времени начала."""
        conditions = [
            Reservation.agenda_id == agenda_id,
            Reservation.date_reserved == day,
            Reservation.state != ReservationState.CANCELLED,
        ]
        if exclude_id:
            conditions.append(Reservation.id != exclude_id)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=[Reservation.time_start.asc()],
        )

    async def has_range_conflict(
        self,
        session: AsyncSession,
        agenda_id: UUID,
        day: date,
        time_start: time,
        time_end: time,
    ) -> bool:
        """Проверка занятости по замкнутым диапазонам времени.

        Касание границами здесь считается конфликтом: так отвечает
        проверка доступности, на которую опираются клиенты API.
        """
        stmt = select(Reservation.id).where(
            Reservation.agenda_id == agenda_id,
            Reservation.date_reserved == day,
            Reservation.state != ReservationState.CANCELLED,
            range_overlap_clause(
                Reservation.time_start,
                Reservation.time_end,
                time_start,
                time_end,
            ),
        )
        result = await session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def lock_day(
        self,
        session: AsyncSession,
        agenda_id: UUID,
        day: date,
    ) -> None:
        """Берёт транзакционную блокировку на день агенды.

        Блокировка держится до commit/rollback, поэтому проверка занятости
        и вставка резерва выполняются без гонки между запросами.
        """
        await session.execute(
            select(func.pg_advisory_xact_lock(day_lock_key(agenda_id, day))),
        )


reservation_repository = ReservationRepository()
