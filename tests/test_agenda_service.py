"""Тесты бизнес-логики агенд."""

import uuid
from datetime import date, time

import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.schemas.agenda import (
    AgendaAvailabilityCheck,
    AgendaCreate,
    AgendaUpdate,
)
from app.utils.enums import Weekday


def agenda_payload(service_id, **overrides) -> AgendaCreate:
    data = {
        'service_id': service_id,
        'date_start': date(2030, 1, 1),
        'date_end': date(2030, 1, 31),
        'work_start': time(9, 0),
        'work_end': time(17, 0),
        'interval_minutes': 30,
        'active_weekdays': [Weekday.FRIDAY, Weekday.MONDAY, Weekday.MONDAY],
        **overrides,
    }
    return AgendaCreate(**data)


class TestCreateAgenda:
    """Создание агенды"""

    async def test_create(self, agenda_service, service):
        agenda = await agenda_service.create(
            None,
            agenda_payload(service.id, notes='  утро  '),
        )

        assert agenda.is_active is True
        assert agenda.active_weekdays == [1, 5]
        assert agenda.notes == 'утро'

    async def test_unknown_service(self, agenda_service):
        with pytest.raises(NotFoundError):
            await agenda_service.create(None, agenda_payload(uuid.uuid4()))

    async def test_overlapping_active_agenda_rejected(
        self,
        agenda_service,
        service,
    ):
        first = await agenda_service.create(None, agenda_payload(service.id))
        overlapping = agenda_payload(
            service.id,
            date_start=date(2030, 1, 31),
            date_end=date(2030, 2, 28),
        )

        with pytest.raises(ConflictError):
            await agenda_service.create(None, overlapping)

        await agenda_service.deactivate(None, first.id)
        second = await agenda_service.create(None, overlapping)
        assert second.is_active is True

    async def test_inactive_agenda_skips_conflict_check(
        self,
        agenda_service,
        service,
    ):
        await agenda_service.create(None, agenda_payload(service.id))
        draft = await agenda_service.create(
            None,
            agenda_payload(service.id, is_active=False),
        )
        assert draft.is_active is False

    async def test_other_service_does_not_conflict(
        self,
        agenda_service,
        services_repo,
        service,
    ):
        other = services_repo.add(
            business_id=service.business_id,
            name='Окрашивание',
            description=None,
            duration=60,
            price=service.price,
        )
        await agenda_service.create(None, agenda_payload(service.id))
        assert await agenda_service.create(None, agenda_payload(other.id))

    @pytest.mark.parametrize(
        ('overrides', 'field'),
        [
            ({'date_end': date(2029, 12, 31)}, 'date_end'),
            ({'work_end': time(9, 0)}, 'work_end'),
            ({'break_start': time(12, 0)}, 'break_end'),
            (
                {'break_start': time(8, 0), 'break_end': time(8, 30)},
                'break_start',
            ),
            (
                {'break_start': time(13, 0), 'break_end': time(12, 0)},
                'break_end',
            ),
        ],
    )
    async def test_invalid_template(
        self,
        agenda_service,
        service,
        overrides,
        field,
    ):
        with pytest.raises(ValidationError) as exc_info:
            await agenda_service.create(
                None,
                agenda_payload(service.id, **overrides),
            )
        assert field in exc_info.value.errors


class TestUpdateAgenda:
    """Частичное обновление"""

    async def test_update_merges_and_revalidates(self, agenda_service, agenda):
        with pytest.raises(ValidationError) as exc_info:
            await agenda_service.update(
                None,
                agenda.id,
                AgendaUpdate(work_start=time(13, 0)),
            )
        assert 'work_end' in exc_info.value.errors

    async def test_update_break(self, agenda_service, agenda, cache):
        updated = await agenda_service.update(
            None,
            agenda.id,
            AgendaUpdate(break_start=time(10, 0), break_end=time(10, 15)),
        )

        assert updated.break_start == time(10, 0)
        assert agenda.id in cache.cleared_agendas

    async def test_clear_break(self, agenda_service, make_agenda):
        agenda = make_agenda(break_start=time(10, 0), break_end=time(10, 15))
        updated = await agenda_service.update(
            None,
            agenda.id,
            AgendaUpdate(break_start=None, break_end=None),
        )
        assert updated.break_start is None
        assert updated.break_end is None

    async def test_moving_dates_onto_other_agenda(
        self,
        agenda_service,
        make_agenda,
    ):
        make_agenda(date_start=date(2030, 4, 1), date_end=date(2030, 4, 30))
        agenda = make_agenda()

        with pytest.raises(ConflictError):
            await agenda_service.update(
                None,
                agenda.id,
                AgendaUpdate(date_end=date(2030, 4, 1)),
            )

    async def test_own_range_is_not_a_conflict(self, agenda_service, agenda):
        updated = await agenda_service.update(
            None,
            agenda.id,
            AgendaUpdate(date_end=date(2030, 2, 28)),
        )
        assert updated.date_end == date(2030, 2, 28)

    async def test_activation_through_update_rechecks(
        self,
        agenda_service,
        make_agenda,
    ):
        make_agenda()
        draft = make_agenda(is_active=False)

        with pytest.raises(ConflictError):
            await agenda_service.update(
                None,
                draft.id,
                AgendaUpdate(is_active=True),
            )

    async def test_missing_agenda(self, agenda_service):
        with pytest.raises(NotFoundError):
            await agenda_service.update(None, uuid.uuid4(), AgendaUpdate())


class TestAgendaLifecycle:
    """Деактивация и повторная активация"""

    async def test_deactivate_is_soft(self, agenda_service, agenda, agendas_repo):
        await agenda_service.deactivate(None, agenda.id)

        assert agendas_repo.rows[agenda.id].is_active is False

    async def test_reactivate_rechecks_overlap(
        self,
        agenda_service,
        make_agenda,
    ):
        first = make_agenda()
        await agenda_service.deactivate(None, first.id)
        make_agenda(date_start=date(2030, 3, 1), date_end=date(2030, 6, 30))

        with pytest.raises(ConflictError):
            await agenda_service.activate(None, first.id)

    async def test_reactivate(self, agenda_service, agenda, cache):
        await agenda_service.deactivate(None, agenda.id)
        activated = await agenda_service.activate(None, agenda.id)

        assert activated.is_active is True
        assert cache.cleared_agendas == [agenda.id, agenda.id]

    async def test_list_by_service_only_active(
        self,
        agenda_service,
        make_agenda,
        service,
    ):
        later = make_agenda(
            date_start=date(2030, 5, 1),
            date_end=date(2030, 5, 31),
        )
        earlier = make_agenda()
        make_agenda(
            date_start=date(2030, 7, 1),
            date_end=date(2030, 7, 31),
            is_active=False,
        )

        agendas = await agenda_service.list_by_service(None, service.id)
        assert agendas == [earlier, later]


class TestAgendaAvailabilityCheck:
    """Проверка свободного диапазона дат"""

    async def test_range_taken(self, agenda_service, agenda):
        assert not await agenda_service.check_availability(
            None,
            AgendaAvailabilityCheck(
                service_id=agenda.service_id,
                date_start=date(2030, 3, 31),
                date_end=date(2030, 4, 30),
            ),
        )

    async def test_range_free(self, agenda_service, agenda):
        assert await agenda_service.check_availability(
            None,
            AgendaAvailabilityCheck(
                service_id=agenda.service_id,
                date_start=date(2030, 4, 1),
                date_end=date(2030, 4, 30),
            ),
        )
