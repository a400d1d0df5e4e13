from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Agenda
from app.repositories.base import CRUDBase, range_overlap_clause
from app.schemas.agenda import AgendaCreate, AgendaUpdate


class AgendaRepository(CRUDBase[Agenda, AgendaCreate, AgendaUpdate]):
    """Репозиторий для операций с агендами."""

    def __init__(self) -> None:
        """Инициализация репозитория агенд."""
        super().__init__(Agenda)

    async def get_filtered(
        self,
        session: AsyncSession,
        *,
        service_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
        starts_from: Optional[date] = None,
        ends_until: Optional[date] = None,
    ) -> List[Agenda]:
        """Получает агенды по необязательным фильтрам, новые первыми."""
        conditions = []
        if service_id is not None:
            conditions.append(Agenda.service_id == service_id)
        if is_active is not None:
            conditions.append(Agenda.is_active.is_(is_active))
        if starts_from is not None:
            conditions.append(Agenda.date_start >= starts_from)
        if ends_until is not None:
            conditions.append(Agenda.date_end <= ends_until)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=[Agenda.created_at.desc()],
        )

    async def get_active_by_service(
        self,
        session: AsyncSession,
        service_id: UUID,
    ) -> List[Agenda]:
        """Активные агенды услуги по возрастанию даты начала."""
        return await self.get(
            session,
            Agenda.is_active.is_(True),
            service_id=service_id,
            many=True,
            order_by=[Agenda.date_start.asc()],
        )

    async def has_date_conflict(
        self,
        session: AsyncSession,
        service_id: UUID,
        date_start: date,
        date_end: date,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        """Есть ли активная агенда услуги с пересекающимся диапазоном дат."""
        stmt = select(Agenda.id).where(
            Agenda.service_id == service_id,
            Agenda.is_active.is_(True),
            range_overlap_clause(
                Agenda.date_start,
                Agenda.date_end,
                date_start,
                date_end,
            ),
        )
        if exclude_id:
            stmt = stmt.where(Agenda.id != exclude_id)
        result = await session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None


agenda_repository = AgendaRepository()
