from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Agenda
from app.repositories import (
    AgendaRepository,
    ServiceRepository,
    agenda_repository,
    service_repository,
)
from app.schemas.agenda import (
    AgendaAvailabilityCheck,
    AgendaCreate,
    AgendaUpdate,
    AgendaWithSlots,
)
from app.services.availability_service import (
    AvailabilityService,
    availability_service,
)
from app.utils.validators import check_agenda_rules

RULE_FIELDS = (
    'date_start',
    'date_end',
    'work_start',
    'work_end',
    'interval_minutes',
    'active_weekdays',
    'break_start',
    'break_end',
)
SCOPE_FIELDS = ('service_id', 'date_start', 'date_end')
NULLABLE_FIELDS = frozenset({'break_start', 'break_end', 'notes'})

AGENDA_NOT_FOUND = 'Агенда не найдена'
SERVICE_NOT_FOUND = 'Услуга не найдена'
AGENDA_INVALID = 'Некорректные параметры агенды'
AGENDA_CONFLICT = (
    'У услуги уже есть активная агенда на пересекающийся диапазон дат'
)


def _weekdays_column(weekdays: Any) -> list[int]:
    """Набор дней недели в виде упорядоченного списка для ARRAY-колонки."""
    return sorted({int(day) for day in weekdays})


class AgendaService:
    """Бизнес-логика агенд: проверка пересечений и жизненный цикл."""

    def __init__(
        self,
        agendas: AgendaRepository = agenda_repository,
        services: ServiceRepository = service_repository,
        availability: AvailabilityService = availability_service,
    ) -> None:
        self.agendas = agendas
        self.services = services
        self.availability = availability

    async def has_conflict(
        self,
        session: AsyncSession,
        service_id: UUID,
        date_start: date,
        date_end: date,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        """Есть ли у услуги другая активная агенда на пересекающиеся даты.

        Диапазоны сравниваются как замкнутые: агенда, заканчивающаяся в
        день начала другой, тоже считается пересечением.
        """
        return await self.agendas.has_date_conflict(
            session,
            service_id,
            date_start,
            date_end,
            exclude_id=exclude_id,
        )

    async def get(self, session: AsyncSession, agenda_id: UUID) -> Agenda:
        agenda = await self.agendas.get_by_id(session, agenda_id)
        if agenda is None:
            logger.warning(f'Агенда {agenda_id} не найдена')
            raise NotFoundError(AGENDA_NOT_FOUND)
        return agenda

    async def list(
        self,
        session: AsyncSession,
        *,
        service_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
        starts_from: Optional[date] = None,
        ends_until: Optional[date] = None,
    ) -> List[Agenda]:
        return await self.agendas.get_filtered(
            session,
            service_id=service_id,
            is_active=is_active,
            starts_from=starts_from,
            ends_until=ends_until,
        )

    async def list_by_service(
        self,
        session: AsyncSession,
        service_id: UUID,
    ) -> List[Agenda]:
        """Активные агенды услуги по возрастанию даты начала."""
        await self._ensure_service(session, service_id)
        return await self.agendas.get_active_by_service(session, service_id)

    async def with_slots(
        self,
        session: AsyncSession,
        agendas: List[Agenda],
        day: date,
    ) -> List[AgendaWithSlots]:
        return [
            await self.availability.annotate(session, agenda, day)
            for agenda in agendas
        ]

    async def check_availability(
        self,
        session: AsyncSession,
        data: AgendaAvailabilityCheck,
    ) -> bool:
        """Свободен ли диапазон дат для новой активной агенды услуги."""
        await self._ensure_service(session, data.service_id)
        return not await self.has_conflict(
            session,
            data.service_id,
            data.date_start,
            data.date_end,
        )

    async def create(
        self,
        session: AsyncSession,
        data: AgendaCreate,
    ) -> Agenda:
        """Создаёт агенду после проверки шаблона и пересечения дат.

        Пересечение проверяется только для активной агенды: неактивную
        можно завести заранее и включить позже.
        """
        payload = data.model_dump()
        self._check_rules(payload)
        await self._ensure_service(session, data.service_id)
        if data.is_active:
            await self._ensure_no_conflict(
                session,
                data.service_id,
                data.date_start,
                data.date_end,
            )
        payload['active_weekdays'] = _weekdays_column(data.active_weekdays)
        agenda = await self.agendas.create_from_data(session, payload)
        logger.info(
            f'Создана агенда {agenda.id} для услуги {agenda.service_id} '
            f'({agenda.date_start} - {agenda.date_end})',
        )
        return agenda

    async def update(
        self,
        session: AsyncSession,
        agenda_id: UUID,
        data: AgendaUpdate,
    ) -> Agenda:
        """Частично обновляет агенду.

        Шаблон перепроверяется на слитых значениях. Пересечение дат
        проверяется, если итоговая агенда активна и изменились услуга,
        даты или агенда включается этим обновлением.
        """
        agenda = await self.get(session, agenda_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        merged = {
            field: changes.get(field, getattr(agenda, field))
            for field in (*RULE_FIELDS, *SCOPE_FIELDS, 'is_active')
        }
        self._check_rules(merged)

        if merged['service_id'] != agenda.service_id:
            await self._ensure_service(session, merged['service_id'])

        scope_changed = any(
            merged[field] != getattr(agenda, field) for field in SCOPE_FIELDS
        )
        activated = merged['is_active'] and not agenda.is_active
        if merged['is_active'] and (scope_changed or activated):
            await self._ensure_no_conflict(
                session,
                merged['service_id'],
                merged['date_start'],
                merged['date_end'],
                exclude_id=agenda.id,
            )

        if 'active_weekdays' in changes:
            changes['active_weekdays'] = _weekdays_column(
                changes['active_weekdays'],
            )
        agenda = await self.agendas.apply_update(session, agenda, changes)
        await self.availability.invalidate_agenda(agenda.id)
        return agenda

    async def deactivate(
        self,
        session: AsyncSession,
        agenda_id: UUID,
    ) -> Agenda:
        """Мягкое удаление: агенда выключается, но остаётся в базе."""
        agenda = await self.get(session, agenda_id)
        if not agenda.is_active:
            return agenda
        agenda = await self.agendas.apply_update(
            session,
            agenda,
            {'is_active': False},
        )
        await self.availability.invalidate_agenda(agenda.id)
        logger.info(f'Агенда {agenda.id} деактивирована')
        return agenda

    async def activate(self, session: AsyncSession, agenda_id: UUID) -> Agenda:
        """Повторное включение агенды с проверкой пересечения дат."""
        agenda = await self.get(session, agenda_id)
        if agenda.is_active:
            return agenda
        await self._ensure_no_conflict(
            session,
            agenda.service_id,
            agenda.date_start,
            agenda.date_end,
            exclude_id=agenda.id,
        )
        agenda = await self.agendas.apply_update(
            session,
            agenda,
            {'is_active': True},
        )
        await self.availability.invalidate_agenda(agenda.id)
        logger.info(f'Агенда {agenda.id} активирована')
        return agenda

    async def _ensure_service(
        self,
        session: AsyncSession,
        service_id: UUID,
    ) -> None:
        if not await self.services.exists(session, service_id):
            logger.warning(f'Услуга {service_id} не найдена')
            raise NotFoundError(SERVICE_NOT_FOUND)

    async def _ensure_no_conflict(
        self,
        session: AsyncSession,
        service_id: UUID,
        date_start: date,
        date_end: date,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if await self.has_conflict(
            session,
            service_id,
            date_start,
            date_end,
            exclude_id=exclude_id,
        ):
            logger.warning(
                f'Пересечение агенд услуги {service_id}: '
                f'{date_start} - {date_end}',
            )
            raise ConflictError(AGENDA_CONFLICT)

    @staticmethod
    def _check_rules(values: dict[str, Any]) -> None:
        errors = check_agenda_rules(
            **{field: values.get(field) for field in RULE_FIELDS},
        )
        if errors:
            logger.warning(f'Некорректная агенда: {errors}')
            raise ValidationError(AGENDA_INVALID, errors)


agenda_service = AgendaService()
