from datetime import date, time
from typing import Any, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from app.models import Agenda, Reservation
from app.repositories import (
    AgendaRepository,
    ReservationRepository,
    ServiceRepository,
    UserRepository,
    agenda_repository,
    reservation_repository,
    service_repository,
    user_repository,
)
from app.schemas.reservation import (
    ReservationAvailabilityCheck,
    ReservationCreate,
    ReservationUpdate,
)
from app.services.availability_service import (
    AvailabilityService,
    availability_service,
)
from app.services.reservation_lifecycle import TERMINAL_STATES, apply_transition
from app.services.reservation_validator import Rejection, check_reservation
from app.utils.enums import RejectReason, ReservationState
from app.utils.validators import check_time_window

SCHEDULE_FIELDS = ('agenda_id', 'date_reserved', 'time_start', 'time_end')
NULLABLE_FIELDS = frozenset({'notes'})

RESERVATION_NOT_FOUND = 'Резерв не найден'
USER_NOT_FOUND = 'Пользователь не найден'
SERVICE_NOT_FOUND = 'Услуга не найдена'
RESERVATION_INVALID = 'Некорректные параметры резерва'
DATE_IN_PAST = 'Дата резерва не может быть в прошлом'
SERVICE_MISMATCH = 'Услуга резерва не совпадает с услугой агенды'
SCHEDULE_LOCKED = 'Нельзя переносить завершённый или отменённый резерв'
INTERVAL_FREE = 'Интервал свободен'
INTERVAL_TAKEN = 'Интервал уже занят'


def rejection_error(rejection: Rejection) -> AppError:
    """Переводит отказ проверки в доменную ошибку для ответа API."""
    errors = {rejection.field: rejection.message}
    if rejection.reason is RejectReason.AGENDA_UNAVAILABLE:
        return NotFoundError(rejection.message, errors)
    if rejection.reason is RejectReason.SLOT_TAKEN:
        return ConflictError(rejection.message, errors)
    return ValidationError(rejection.message, errors)


class ReservationService:
    """Бизнес-логика резервов: проверка по агенде и жизненный цикл."""

    def __init__(
        self,
        reservations: ReservationRepository = reservation_repository,
        agendas: AgendaRepository = agenda_repository,
        services: ServiceRepository = service_repository,
        users: UserRepository = user_repository,
        availability: AvailabilityService = availability_service,
    ) -> None:
        self.reservations = reservations
        self.agendas = agendas
        self.services = services
        self.users = users
        self.availability = availability

    async def get(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Reservation:
        reservation = await self.reservations.get_by_id(
            session,
            reservation_id,
        )
        if reservation is None:
            logger.warning(f'Резерв {reservation_id} не найден')
            raise NotFoundError(RESERVATION_NOT_FOUND)
        return reservation

    async def list(
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
        return await self.reservations.get_filtered(
            session,
            user_id=user_id,
            service_id=service_id,
            agenda_id=agenda_id,
            state=state,
            date_from=date_from,
            date_to=date_to,
        )

    async def list_by_user(
        self,
        session: AsyncSession,
        user_id: UUID,
    ) -> List[Reservation]:
        """История резервов клиента, самые поздние первыми."""
        await self._ensure_user(session, user_id)
        return await self.reservations.get_filtered(session, user_id=user_id)

    async def check_availability(
        self,
        session: AsyncSession,
        data: ReservationAvailabilityCheck,
    ) -> bool:
        """Свободен ли интервал по замкнутым диапазонам времени.

        Касание границами здесь считается занятостью, в отличие от
        проверки при создании резерва.
        """
        if not await self.agendas.exists(session, data.agenda_id):
            raise NotFoundError('Агенда не найдена')
        return not await self.reservations.has_range_conflict(
            session,
            data.agenda_id,
            data.date_reserved,
            data.time_start,
            data.time_end,
        )

    async def create(
        self,
        session: AsyncSession,
        data: ReservationCreate,
        today: date,
    ) -> Reservation:
        """Создаёт резерв после полной проверки по агенде.

        Проверка занятости и вставка идут под блокировкой дня агенды,
        поэтому два параллельных запроса не займут один интервал.
        """
        self._check_window(data.time_start, data.time_end)
        self._check_not_past(data.date_reserved, today)
        await self._ensure_user(session, data.user_id)
        await self._ensure_service(session, data.service_id)

        agenda = await self._gate(
            session,
            data.agenda_id,
            data.date_reserved,
            data.time_start,
            data.time_end,
        )
        self._check_service_matches(agenda, data.service_id)

        reservation = await self.reservations.create_from_data(
            session,
            data.model_dump(),
        )
        await self.availability.invalidate_day(
            reservation.agenda_id,
            reservation.date_reserved,
        )
        logger.info(
            f'Создан резерв {reservation.id}: агенда {reservation.agenda_id}, '
            f'{reservation.date_reserved} {reservation.time_start}-'
            f'{reservation.time_end}',
        )
        return reservation

    async def update(
        self,
        session: AsyncSession,
        reservation_id: UUID,
        data: ReservationUpdate,
        today: date,
    ) -> Reservation:
        """Частично обновляет резерв.

        При переносе (агенда, дата или время) резерв заново проходит
        полную проверку без учёта самого себя. Смена статуса идёт по
        правилам жизненного цикла.
        """
        reservation = await self.get(session, reservation_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if 'state' in changes:
            changes['state'] = apply_transition(
                reservation.state,
                changes['state'],
            )
        if 'user_id' in changes:
            await self._ensure_user(session, changes['user_id'])
        if 'service_id' in changes:
            await self._ensure_service(session, changes['service_id'])

        merged = {
            field: changes.get(field, getattr(reservation, field))
            for field in (*SCHEDULE_FIELDS, 'service_id')
        }
        rescheduled = any(
            merged[field] != getattr(reservation, field)
            for field in SCHEDULE_FIELDS
        )
        if rescheduled:
            if reservation.state in TERMINAL_STATES:
                raise StateError(SCHEDULE_LOCKED)
            self._check_window(merged['time_start'], merged['time_end'])
            if merged['date_reserved'] != reservation.date_reserved:
                self._check_not_past(merged['date_reserved'], today)
            agenda = await self._gate(
                session,
                merged['agenda_id'],
                merged['date_reserved'],
                merged['time_start'],
                merged['time_end'],
                exclude_id=reservation.id,
            )
            self._check_service_matches(agenda, merged['service_id'])
        elif 'service_id' in changes:
            agenda = await self.agendas.get_by_id(
                session,
                reservation.agenda_id,
            )
            self._check_service_matches(agenda, merged['service_id'])

        previous_day = (reservation.agenda_id, reservation.date_reserved)
        reservation = await self.reservations.apply_update(
            session,
            reservation,
            changes,
        )
        await self.availability.invalidate_day(*previous_day)
        await self.availability.invalidate_day(
            reservation.agenda_id,
            reservation.date_reserved,
        )
        return reservation

    async def cancel(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Reservation:
        """Отменяет резерв и освобождает его интервал."""
        return await self._transition(
            session,
            reservation_id,
            ReservationState.CANCELLED,
        )

    async def confirm(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Reservation:
        return await self._transition(
            session,
            reservation_id,
            ReservationState.CONFIRMED,
        )

    async def complete(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Reservation:
        return await self._transition(
            session,
            reservation_id,
            ReservationState.COMPLETED,
        )

    async def _transition(
        self,
        session: AsyncSession,
        reservation_id: UUID,
        target: ReservationState,
    ) -> Reservation:
        reservation = await self.get(session, reservation_id)
        current = reservation.state
        new_state = apply_transition(current, target)
        if new_state == current:
            return reservation
        reservation = await self.reservations.apply_update(
            session,
            reservation,
            {'state': new_state},
        )
        await self.availability.invalidate_day(
            reservation.agenda_id,
            reservation.date_reserved,
        )
        logger.info(
            f'Резерв {reservation.id}: {current.value} -> {new_state.value}',
        )
        return reservation

    async def _gate(
        self,
        session: AsyncSession,
        agenda_id: UUID,
        day: date,
        time_start: time,
        time_end: time,
        exclude_id: Optional[UUID] = None,
    ) -> Agenda:
        """Блокирует день агенды и прогоняет проверку резерва."""
        await self.reservations.lock_day(session, agenda_id, day)
        agenda = await self.agendas.get_by_id(session, agenda_id)
        siblings: List[Reservation] = []
        if agenda is not None:
            siblings = await self.reservations.get_day_reservations(
                session,
                agenda_id,
                day,
                exclude_id=exclude_id,
            )
        rejection = check_reservation(
            agenda,
            day,
            time_start,
            time_end,
            siblings,
        )
        if rejection is not None:
            logger.warning(
                f'Резерв отклонён ({rejection.reason.value}): агенда '
                f'{agenda_id}, {day} {time_start}-{time_end}',
            )
            raise rejection_error(rejection)
        return agenda

    async def _ensure_user(self, session: AsyncSession, user_id: UUID) -> None:
        if not await self.users.exists(session, user_id):
            logger.warning(f'Пользователь {user_id} не найден')
            raise NotFoundError(USER_NOT_FOUND)

    async def _ensure_service(
        self,
        session: AsyncSession,
        service_id: UUID,
    ) -> None:
        if not await self.services.exists(session, service_id):
            logger.warning(f'Услуга {service_id} не найдена')
            raise NotFoundError(SERVICE_NOT_FOUND)

    @staticmethod
    def _check_window(time_start: time, time_end: time) -> None:
        errors = check_time_window(time_start, time_end)
        if errors:
            raise ValidationError(RESERVATION_INVALID, errors)

    @staticmethod
    def _check_not_past(day: date, today: date) -> None:
        if day < today:
            raise ValidationError(DATE_IN_PAST, {'date_reserved': DATE_IN_PAST})

    @staticmethod
    def _check_service_matches(agenda: Agenda, service_id: Any) -> None:
        if agenda.service_id != service_id:
            raise ValidationError(
                SERVICE_MISMATCH,
                {'service_id': SERVICE_MISMATCH},
            )


reservation_service = ReservationService()
