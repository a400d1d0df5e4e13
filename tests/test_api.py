"""Тесты HTTP-слоя: коды ответов и формат ошибок.

Сессия БД подменяется на None, сервисы-синглтоны эндпоинтов на
экземпляры с in-memory репозиториями из conftest.
"""

import uuid
from datetime import date, time

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.endpoints import agenda as agenda_endpoints
from app.api.endpoints import reservation as reservation_endpoints
from app.api.endpoints import service as service_endpoints
from app.core.db import get_async_session
from app.core.dependencies import get_today
from app.main import app

TODAY = date(2030, 1, 1)


async def _no_session():
    yield None


@pytest.fixture
async def client(
    monkeypatch,
    agenda_service,
    reservation_service,
    catalog_service,
):
    monkeypatch.setattr(agenda_endpoints, 'agenda_service', agenda_service)
    monkeypatch.setattr(
        reservation_endpoints,
        'reservation_service',
        reservation_service,
    )
    monkeypatch.setattr(service_endpoints, 'catalog_service', catalog_service)
    app.dependency_overrides[get_async_session] = _no_session
    app.dependency_overrides[get_today] = lambda: TODAY

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def agenda_body(service_id, **overrides) -> dict:
    return {
        'service_id': str(service_id),
        'date_start': '2030-04-01',
        'date_end': '2030-04-30',
        'work_start': '09:00',
        'work_end': '12:00',
        'interval_minutes': 30,
        'active_weekdays': [5, 1, 3],
        **overrides,
    }


def reservation_body(agenda, user_id, **overrides) -> dict:
    return {
        'user_id': str(user_id),
        'service_id': str(agenda.service_id),
        'agenda_id': str(agenda.id),
        'date_reserved': '2030-01-07',
        'time_start': '09:00',
        'time_end': '09:30',
        'total_price': '25.00',
        **overrides,
    }


class TestAgendaApi:
    """Эндпоинты агенд"""

    async def test_store(self, client, service):
        response = await client.post(
            '/agenda/store',
            json=agenda_body(service.id),
        )

        assert response.status_code == 201
        body = response.json()
        assert body['active_weekdays'] == [1, 3, 5]
        assert body['work_start'] == '09:00:00'
        assert body['is_active'] is True

    async def test_store_overlap(self, client, agenda):
        response = await client.post(
            '/agenda/store',
            json=agenda_body(
                agenda.service_id,
                date_start='2030-03-31',
            ),
        )

        assert response.status_code == 409
        body = response.json()
        assert body['status'] == 'error'
        assert body['code'] == 409

    async def test_store_inconsistent_template(self, client, service):
        response = await client.post(
            '/agenda/store',
            json=agenda_body(service.id, work_end='08:00'),
        )

        assert response.status_code == 400
        assert 'work_end' in response.json()['errors']

    async def test_store_schema_error(self, client, service):
        response = await client.post(
            '/agenda/store',
            json=agenda_body(service.id, active_weekdays=[]),
        )

        assert response.status_code == 422
        assert 'active_weekdays' in response.json()['errors']

    async def test_show_with_slots(self, client, agenda):
        response = await client.get(
            f'/agenda/show/{agenda.id}',
            params={'fecha': '2030-01-07'},
        )

        assert response.status_code == 200
        body = response.json()
        assert body['slots_date'] == '2030-01-07'
        assert [slot['start'] for slot in body['slots']] == [
            '09:00',
            '09:30',
            '10:00',
            '10:30',
            '11:00',
            '11:30',
        ]

    async def test_show_defaults_to_today(self, client, agenda):
        response = await client.get(f'/agenda/show/{agenda.id}')

        body = response.json()
        assert body['slots_date'] == TODAY.isoformat()
        assert body['slots'][0] == {
            'start': '09:00',
            'end': '09:30',
            'available': True,
        }

    async def test_show_missing(self, client):
        response = await client.get(f'/agenda/show/{uuid.uuid4()}')

        assert response.status_code == 404
        assert response.json()['code'] == 404

    async def test_delete_and_activate(self, client, agenda):
        response = await client.get(f'/agenda/delete/{agenda.id}')
        assert response.json() == {
            'status': 'success',
            'message': 'Агенда деактивирована',
        }

        response = await client.get(f'/agenda/activate/{agenda.id}')
        assert response.json()['is_active'] is True

    async def test_check_availability(self, client, agenda):
        response = await client.post(
            '/agenda/check-disponibilidad',
            json={
                'service_id': str(agenda.service_id),
                'date_start': '2030-03-31',
                'date_end': '2030-04-30',
            },
        )

        assert response.status_code == 200
        assert response.json()['available'] is False


class TestReservationApi:
    """Эндпоинты резервов"""

    async def test_store_then_conflict(self, client, agenda, user_id):
        response = await client.post(
            '/reservas/store',
            json=reservation_body(agenda, user_id),
        )
        assert response.status_code == 201
        assert response.json()['state'] == 'pending'

        response = await client.post(
            '/reservas/store',
            json=reservation_body(
                agenda,
                user_id,
                time_start='09:15',
                time_end='09:45',
            ),
        )
        assert response.status_code == 409
        assert 'time_start' in response.json()['errors']

    async def test_store_on_weekend(self, client, agenda, user_id):
        response = await client.post(
            '/reservas/store',
            json=reservation_body(agenda, user_id, date_reserved='2030-01-12'),
        )

        assert response.status_code == 400
        assert 'date_reserved' in response.json()['errors']

    async def test_cancel_then_confirm(
        self,
        client,
        make_reservation,
    ):
        reservation = make_reservation(time(9, 0), time(9, 30))

        response = await client.get(f'/reservas/delete/{reservation.id}')
        assert response.json()['status'] == 'success'

        response = await client.get(f'/reservas/delete/{reservation.id}')
        assert response.status_code == 200

        response = await client.get(f'/reservas/confirmar/{reservation.id}')
        assert response.status_code == 400

    async def test_show_missing(self, client):
        response = await client.get(f'/reservas/show/{uuid.uuid4()}')
        assert response.status_code == 404

    async def test_verify_availability(self, client, agenda):
        response = await client.post(
            '/reservas/verificar-disponibilidad',
            json={
                'agenda_id': str(agenda.id),
                'date_reserved': '2030-01-07',
                'time_start': '09:00',
                'time_end': '09:30',
            },
        )

        assert response.status_code == 200
        assert response.json()['available'] is True

    async def test_request_id_is_echoed(self, client):
        response = await client.get(
            f'/reservas/show/{uuid.uuid4()}',
            headers={'X-Request-ID': 'req-42'},
        )
        assert response.headers['X-Request-ID'] == 'req-42'


class TestServiceApi:
    """Эндпоинты каталога услуг"""

    async def test_duplicate_name(self, client, service):
        response = await client.post(
            '/servicios/store',
            json={
                'business_id': str(service.business_id),
                'name': service.name,
                'duration': 30,
                'price': '20.00',
            },
        )

        assert response.status_code == 409
        assert response.json()['errors'] == {
            'name': 'Услуга с таким названием уже есть у этого бизнеса',
        }
