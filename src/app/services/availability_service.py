from datetime import date, time
from typing import Iterable, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import SLOTS_DATE_OUT_OF_RANGE, SLOTS_DAY_NOT_ACTIVE
from app.models import Agenda, Reservation
from app.repositories import ReservationRepository, reservation_repository
from app.schemas.agenda import AgendaInfo, AgendaWithSlots
from app.schemas.slot import SlotInfo
from app.services.cache_service import CacheService, cache_service
from app.services.slot_generator import generate_slots
from app.utils.enums import Weekday
from app.utils.intervals import TimeInterval


class AvailabilityService:
    """Сервис для проверки доступности интервалов и листинга слотов."""

    def __init__(
        self,
        reservations: ReservationRepository = reservation_repository,
        cache: CacheService = cache_service,
    ) -> None:
        self.reservations = reservations
        self.cache = cache

    @staticmethod
    def is_slot_free(
        reservations: Iterable[Reservation],
        start: time,
        end: time,
    ) -> bool:
        """Свободен ли ``[start, end)`` среди уже загруженных резервов дня.

        Ожидает только неотменённые резервы; касание границами занятостью
        не считается.
        """
        candidate = TimeInterval.from_times(start, end)
        return not any(
            candidate.overlaps(booked.interval) for booked in reservations
        )

    async def is_free(
        self,
        session: AsyncSession,
        agenda_id: UUID,
        day: date,
        start: time,
        end: time,
    ) -> bool:
        """Проверяет, что интервал агенды на дату никем не занят."""
        booked = await self.reservations.get_day_reservations(
            session,
            agenda_id,
            day,
        )
        return self.is_slot_free(booked, start, end)

    async def get_slots(
        self,
        session: AsyncSession,
        agenda: Agenda,
        day: date,
    ) -> tuple[list[SlotInfo], Optional[str]]:
        """Слоты агенды на дату и пояснение, если слотов быть не может.

        Резервы дня читаются одним запросом, доступность каждого слота
        считается в памяти. Результат кешируется на ``REDIS_CACHE_TTL``.
        """
        if not agenda.covers(day):
            return [], SLOTS_DATE_OUT_OF_RANGE
        if Weekday.of(day) not in agenda.weekdays:
            return [], SLOTS_DAY_NOT_ACTIVE

        cached = await self.cache.get_slots(agenda.id, day)
        if cached is not None:
            return [SlotInfo.model_validate(slot) for slot in cached], None

        booked = await self.reservations.get_day_reservations(
            session,
            agenda.id,
            day,
        )
        slots = [
            SlotInfo(start=slot.start, end=slot.end, available=slot.available)
            for slot in generate_slots(
                agenda.work_start,
                agenda.work_end,
                agenda.interval_minutes,
                agenda.break_start,
                agenda.break_end,
                is_free=lambda start, end: self.is_slot_free(
                    booked,
                    start,
                    end,
                ),
            )
        ]
        await self.cache.set_slots(
            agenda.id,
            day,
            [slot.model_dump(mode='json') for slot in slots],
        )
        return slots, None

    async def annotate(
        self,
        session: AsyncSession,
        agenda: Agenda,
        day: date,
    ) -> AgendaWithSlots:
        """Агенда вместе со слотами на запрошенную дату."""
        slots, message = await self.get_slots(session, agenda, day)
        info = AgendaInfo.model_validate(agenda)
        return AgendaWithSlots(
            **info.model_dump(),
            slots_date=day,
            slots=slots,
            slots_message=message,
        )

    async def invalidate_day(self, agenda_id: UUID, day: date) -> None:
        logger.debug(f'Сброс кеша слотов агенды {agenda_id} на {day}')
        await self.cache.clear_day_slots(agenda_id, day)

    async def invalidate_agenda(self, agenda_id: UUID) -> None:
        logger.debug(f'Сброс кеша слотов агенды {agenda_id}')
        await self.cache.clear_agenda_slots(agenda_id)


availability_service = AvailabilityService()
