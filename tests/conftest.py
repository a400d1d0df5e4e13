"""Общие фикстуры тестов.

Переменные окружения выставляются до импорта приложения: настройки
читаются при импорте app.core.config. Репозитории заменяются
in-memory реализациями с теми же асинхронными методами, поэтому
сервисы проверяются без PostgreSQL и Redis; сессия в них не нужна и
передаётся как None.
"""

import os
import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Optional

os.environ.setdefault('POSTGRES_DB', 'agenda_test')
os.environ.setdefault('POSTGRES_USER', 'postgres')
os.environ.setdefault('POSTGRES_PASSWORD', 'postgres')
os.environ.setdefault('POSTGRES_PORT', '5432')
os.environ.setdefault('POSTGRES_HOST', 'localhost')
os.environ.setdefault('REDIS_HOST', 'localhost')
os.environ.setdefault('REDIS_PORT', '6379')
os.environ.setdefault('REDIS_DB', '0')
os.environ.setdefault('REDIS_CACHE_TTL', '60')
os.environ.setdefault('LOG_LEVEL', 'DEBUG')
os.environ.setdefault('LOG_ROTATION', '10 MB')
os.environ.setdefault('LOG_RETENTION', '7 days')

import pytest  # noqa: E402

from app.models import Agenda, Reservation, Service  # noqa: E402
from app.services.agenda_service import AgendaService  # noqa: E402
from app.services.availability_service import (  # noqa: E402
    AvailabilityService,
)
from app.services.catalog_service import CatalogService  # noqa: E402
from app.services.reservation_service import (  # noqa: E402
    ReservationService,
)
from app.utils.enums import ReservationState  # noqa: E402
from app.utils.intervals import range_overlaps  # noqa: E402

MONDAY = date(2030, 1, 7)


def _stamp(data: dict[str, Any]) -> dict[str, Any]:
    """Поля, которые в БД заполняет сервер."""
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    return {
        'id': uuid.uuid4(),
        'is_active': True,
        'created_at': now,
        'updated_at': now,
        **data,
    }


class FakeRepository:
    """Общая часть in-memory репозиториев."""

    model: Any = None

    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, Any] = {}

    def add(self, **data: Any) -> Any:
        obj = self.model(**_stamp(data))
        self.rows[obj.id] = obj
        return obj

    async def get_by_id(self, session: Any, obj_id: uuid.UUID) -> Any:
        return self.rows.get(obj_id)

    async def exists(self, session: Any, obj_id: uuid.UUID) -> bool:
        return obj_id in self.rows

    async def create_from_data(self, session: Any, data: dict) -> Any:
        return self.add(**data)

    async def apply_update(self, session: Any, db_obj: Any, data: dict) -> Any:
        for field, value in data.items():
            setattr(db_obj, field, value)
        return db_obj

    async def delete(self, session: Any, db_obj: Any) -> Any:
        self.rows.pop(db_obj.id, None)
        return db_obj


class FakeServiceRepository(FakeRepository):
    model = Service

    def __init__(self) -> None:
        super().__init__()
        self.businesses: set[uuid.UUID] = set()

    async def business_exists(self, session: Any, business_id: uuid.UUID):
        return business_id in self.businesses

    async def get_by_name(
        self,
        session: Any,
        business_id: uuid.UUID,
        name: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[Service]:
        for service in self.rows.values():
            if (
                service.business_id == business_id
                and service.name == name
                and service.id != exclude_id
            ):
                return service
        return None

    async def get_filtered(self, session: Any, **filters: Any) -> list:
        rows = [
            service
            for service in self.rows.values()
            if filters.get('business_id') in (None, service.business_id)
            and filters.get('is_active') in (None, service.is_active)
        ]
        return sorted(rows, key=lambda service: service.name)


class FakeAgendaRepository(FakeRepository):
    model = Agenda

    async def get_filtered(self, session: Any, **filters: Any) -> list:
        return [
            agenda
            for agenda in self.rows.values()
            if filters.get('service_id') in (None, agenda.service_id)
            and filters.get('is_active') in (None, agenda.is_active)
        ]

    async def get_active_by_service(self, session: Any, service_id):
        return sorted(
            (
                agenda
                for agenda in self.rows.values()
                if agenda.service_id == service_id and agenda.is_active
            ),
            key=lambda agenda: agenda.date_start,
        )

    async def has_date_conflict(
        self,
        session: Any,
        service_id: uuid.UUID,
        date_start: date,
        date_end: date,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> bool:
        return any(
            agenda.service_id == service_id
            and agenda.is_active
            and agenda.id != exclude_id
            and range_overlaps(
                agenda.date_start,
                agenda.date_end,
                date_start,
                date_end,
            )
            for agenda in self.rows.values()
        )


class FakeReservationRepository(FakeRepository):
    model = Reservation

    def __init__(self) -> None:
        super().__init__()
        self.locked: list[tuple[uuid.UUID, date]] = []

    async def lock_day(self, session: Any, agenda_id: uuid.UUID, day: date):
        self.locked.append((agenda_id, day))

    async def get_day_reservations(
        self,
        session: Any,
        agenda_id: uuid.UUID,
        day: date,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> list:
        return sorted(
            (
                reservation
                for reservation in self.rows.values()
                if reservation.agenda_id == agenda_id
                and reservation.date_reserved == day
                and reservation.state != ReservationState.CANCELLED
                and reservation.id != exclude_id
            ),
            key=lambda reservation: reservation.time_start,
        )

    async def has_range_conflict(
        self,
        session: Any,
        agenda_id: uuid.UUID,
        day: date,
        time_start: time,
        time_end: time,
    ) -> bool:
        booked = await self.get_day_reservations(session, agenda_id, day)
        return any(
            range_overlaps(
                reservation.time_start,
                reservation.time_end,
                time_start,
                time_end,
            )
            for reservation in booked
        )

    async def get_filtered(self, session: Any, **filters: Any) -> list:
        rows = [
            reservation
            for reservation in self.rows.values()
            if filters.get('user_id') in (None, reservation.user_id)
            and filters.get('agenda_id') in (None, reservation.agenda_id)
            and filters.get('state') in (None, reservation.state)
        ]
        return sorted(
            rows,
            key=lambda r: (r.date_reserved, r.time_start),
            reverse=True,
        )


class FakeUserRepository(FakeRepository):
    def __init__(self, *user_ids: uuid.UUID) -> None:
        super().__init__()
        self.ids = set(user_ids)

    async def exists(self, session: Any, obj_id: uuid.UUID) -> bool:
        return obj_id in self.ids


class FakeCache:
    """Кеш слотов в памяти с журналом сбросов."""

    def __init__(self) -> None:
        self.slots: dict[tuple[uuid.UUID, date], list[dict]] = {}
        self.cleared_days: list[tuple[uuid.UUID, date]] = []
        self.cleared_agendas: list[uuid.UUID] = []

    async def get_slots(self, agenda_id: uuid.UUID, day: date):
        return self.slots.get((agenda_id, day))

    async def set_slots(self, agenda_id: uuid.UUID, day: date, slots):
        self.slots[(agenda_id, day)] = slots
        return True

    async def clear_day_slots(self, agenda_id: uuid.UUID, day: date):
        self.cleared_days.append((agenda_id, day))
        self.slots.pop((agenda_id, day), None)

    async def clear_agenda_slots(self, agenda_id: uuid.UUID):
        self.cleared_agendas.append(agenda_id)
        for key in [key for key in self.slots if key[0] == agenda_id]:
            del self.slots[key]


@pytest.fixture
def services_repo() -> FakeServiceRepository:
    return FakeServiceRepository()


@pytest.fixture
def agendas_repo() -> FakeAgendaRepository:
    return FakeAgendaRepository()


@pytest.fixture
def reservations_repo() -> FakeReservationRepository:
    return FakeReservationRepository()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def users_repo(user_id: uuid.UUID) -> FakeUserRepository:
    return FakeUserRepository(user_id)


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def service(services_repo: FakeServiceRepository) -> Service:
    """Услуга бизнеса длительностью 30 минут."""
    business_id = uuid.uuid4()
    services_repo.businesses.add(business_id)
    return services_repo.add(
        business_id=business_id,
        name='Стрижка',
        description=None,
        duration=30,
        price=Decimal('25.00'),
    )


@pytest.fixture
def make_agenda(agendas_repo: FakeAgendaRepository, service: Service):
    """Фабрика агенд: по умолчанию пн-пт, 09:00-12:00, шаг 30 минут."""

    def factory(**overrides: Any) -> Agenda:
        data = {
            'service_id': service.id,
            'date_start': date(2030, 1, 1),
            'date_end': date(2030, 3, 31),
            'work_start': time(9, 0),
            'work_end': time(12, 0),
            'interval_minutes': 30,
            'active_weekdays': [1, 2, 3, 4, 5],
            'break_start': None,
            'break_end': None,
            'auto_generate_slots': True,
            'notes': None,
            **overrides,
        }
        return agendas_repo.add(**data)

    return factory


@pytest.fixture
def agenda(make_agenda) -> Agenda:
    return make_agenda()


@pytest.fixture
def make_reservation(
    reservations_repo: FakeReservationRepository,
    agenda: Agenda,
    user_id: uuid.UUID,
):
    """Фабрика уже сохранённых резервов в агенде по умолчанию."""

    def factory(
        start: time,
        end: time,
        state: ReservationState = ReservationState.CONFIRMED,
        day: date = MONDAY,
    ) -> Reservation:
        return reservations_repo.add(
            user_id=user_id,
            service_id=agenda.service_id,
            agenda_id=agenda.id,
            date_reserved=day,
            time_start=start,
            time_end=end,
            state=state,
            notes=None,
            total_price=Decimal('25.00'),
        )

    return factory


@pytest.fixture
def availability(
    reservations_repo: FakeReservationRepository,
    cache: FakeCache,
) -> AvailabilityService:
    return AvailabilityService(reservations=reservations_repo, cache=cache)


@pytest.fixture
def agenda_service(
    agendas_repo: FakeAgendaRepository,
    services_repo: FakeServiceRepository,
    availability: AvailabilityService,
) -> AgendaService:
    return AgendaService(
        agendas=agendas_repo,
        services=services_repo,
        availability=availability,
    )


@pytest.fixture
def reservation_service(
    reservations_repo: FakeReservationRepository,
    agendas_repo: FakeAgendaRepository,
    services_repo: FakeServiceRepository,
    users_repo: FakeUserRepository,
    availability: AvailabilityService,
) -> ReservationService:
    return ReservationService(
        reservations=reservations_repo,
        agendas=agendas_repo,
        services=services_repo,
        users=users_repo,
        availability=availability,
    )


@pytest.fixture
def catalog_service(services_repo: FakeServiceRepository) -> CatalogService:
    return CatalogService(services=services_repo)
