from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status
from loguru import logger

from app.core.db import DbSession
from app.core.dependencies import Today
from app.core.exceptions import AppError, InternalError
from app.schemas.agenda import (
    AgendaAvailabilityCheck,
    AgendaCreate,
    AgendaInfo,
    AgendaUpdate,
    AgendaWithSlots,
)
from app.schemas.common import AvailabilityInfo, ErrorResponse, StatusResponse
from app.services.agenda_service import agenda_service
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/agenda', tags=['Агенды'])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
    status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    status.HTTP_409_CONFLICT: {'model': ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
}
SLOTS_DATE_QUERY = Query(
    None,
    alias='fecha',
    description='Дата для листинга слотов (по умолчанию сегодня)',
)


@router.post(
    '/store',
    response_model=AgendaInfo,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@event_logger('Создана', 'Agenda')
async def store_agenda(
    agenda_data: AgendaCreate,
    session: DbSession,
) -> AgendaInfo:
    """Создает агенду услуги.

    Raises:
        ValidationError: 400 если шаблон агенды несогласован
        NotFoundError: 404 если услуга не найдена
        ConflictError: 409 если у услуги есть активная агенда на те же даты

    """
    try:
        return await agenda_service.create(session, agenda_data)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при создании агенды: {str(e)}')
        raise InternalError(f'Ошибка при создании агенды: {str(e)}')


@router.get(
    '/index',
    response_model=list[AgendaWithSlots],
    responses=ERROR_RESPONSES,
)
async def index_agendas(
    session: DbSession,
    today: Today,
    service_id: Optional[UUID] = Query(
        None,
        alias='servicio_id',
        description='ID услуги',
    ),
    is_active: Optional[bool] = Query(
        None,
        alias='activo',
        description='Только активные или только неактивные',
    ),
    starts_from: Optional[date] = Query(
        None,
        alias='fecha_inicio',
        description='Агенды, начинающиеся не раньше даты',
    ),
    ends_until: Optional[date] = Query(
        None,
        alias='fecha_fin',
        description='Агенды, заканчивающиеся не позже даты',
    ),
    day: Optional[date] = SLOTS_DATE_QUERY,
) -> list[AgendaWithSlots]:
    """Получает список агенд со слотами на выбранную дату."""
    try:
        agendas = await agenda_service.list(
            session,
            service_id=service_id,
            is_active=is_active,
            starts_from=starts_from,
            ends_until=ends_until,
        )
        return await agenda_service.with_slots(session, agendas, day or today)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении списка агенд: {str(e)}')
        raise InternalError(f'Ошибка при получении списка агенд: {str(e)}')


@router.get(
    '/show/{agenda_id}',
    response_model=AgendaWithSlots,
    responses=ERROR_RESPONSES,
)
async def show_agenda(
    agenda_id: UUID,
    session: DbSession,
    today: Today,
    day: Optional[date] = SLOTS_DATE_QUERY,
) -> AgendaWithSlots:
    """Получает агенду и её слоты на дату.

    Если дата вне диапазона агенды или день недели неактивен, слотов нет,
    а поле slots_message объясняет почему.
    """
    try:
        agenda = await agenda_service.get(session, agenda_id)
        return await agenda_service.availability.annotate(
            session,
            agenda,
            day or today,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении агенды {agenda_id}: {str(e)}')
        raise InternalError(f'Ошибка при получении агенды: {str(e)}')


@router.post(
    '/update/{agenda_id}',
    response_model=AgendaInfo,
    responses=ERROR_RESPONSES,
)
@event_logger('Обновлена', 'Agenda')
async def update_agenda(
    agenda_id: UUID,
    agenda_data: AgendaUpdate,
    session: DbSession,
) -> AgendaInfo:
    """Частично обновляет агенду."""
    try:
        return await agenda_service.update(session, agenda_id, agenda_data)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении агенды {agenda_id}: {str(e)}')
        raise InternalError(f'Ошибка при обновлении агенды: {str(e)}')


@router.get(
    '/delete/{agenda_id}',
    response_model=StatusResponse,
    responses=ERROR_RESPONSES,
)
async def delete_agenda(
    agenda_id: UUID,
    session: DbSession,
) -> StatusResponse:
    """Деактивирует агенду (мягкое удаление)."""
    try:
        await agenda_service.deactivate(session, agenda_id)
        return StatusResponse(message='Агенда деактивирована')
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при деактивации агенды {agenda_id}: {str(e)}')
        raise InternalError(f'Ошибка при деактивации агенды: {str(e)}')


@router.get(
    '/activate/{agenda_id}',
    response_model=AgendaInfo,
    responses=ERROR_RESPONSES,
)
async def activate_agenda(
    agenda_id: UUID,
    session: DbSession,
) -> AgendaInfo:
    """Повторно включает агенду, если её даты ни с кем не пересекаются."""
    try:
        return await agenda_service.activate(session, agenda_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при активации агенды {agenda_id}: {str(e)}')
        raise InternalError(f'Ошибка при активации агенды: {str(e)}')


@router.get(
    '/servicio/{service_id}',
    response_model=list[AgendaWithSlots],
    responses=ERROR_RESPONSES,
)
async def service_agendas(
    service_id: UUID,
    session: DbSession,
    today: Today,
    day: Optional[date] = SLOTS_DATE_QUERY,
) -> list[AgendaWithSlots]:
    """Активные агенды услуги со слотами на дату."""
    try:
        agendas = await agenda_service.list_by_service(session, service_id)
        return await agenda_service.with_slots(session, agendas, day or today)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении агенд услуги {service_id}: {e}')
        raise InternalError(f'Ошибка при получении агенд услуги: {str(e)}')


@router.post(
    '/check-disponibilidad',
    response_model=AvailabilityInfo,
    responses=ERROR_RESPONSES,
)
async def check_agenda_availability(
    check_data: AgendaAvailabilityCheck,
    session: DbSession,
) -> AvailabilityInfo:
    """Проверяет, свободен ли диапазон дат для новой агенды услуги."""
    try:
        available = await agenda_service.check_availability(
            session,
            check_data,
        )
        return AvailabilityInfo(
            available=available,
            message=(
                'Диапазон дат свободен'
                if available
                else 'Диапазон дат пересекается с активной агендой'
            ),
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка проверки доступности агенды: {str(e)}')
        raise InternalError(f'Ошибка проверки доступности агенды: {str(e)}')
