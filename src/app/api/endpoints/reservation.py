from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status
from loguru import logger

from app.core.db import DbSession
from app.core.dependencies import Today
from app.core.exceptions import AppError, InternalError
from app.schemas.common import AvailabilityInfo, ErrorResponse, StatusResponse
from app.schemas.reservation import (
    ReservationAvailabilityCheck,
    ReservationCreate,
    ReservationInfo,
    ReservationUpdate,
)
from app.services.reservation_service import (
    INTERVAL_FREE,
    INTERVAL_TAKEN,
    reservation_service,
)
from app.utils.enums import ReservationState
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/reservas', tags=['Резервы'])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
    status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    status.HTTP_409_CONFLICT: {'model': ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
}


@router.post(
    '/store',
    response_model=ReservationInfo,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@event_logger('Создана', 'Reservation')
async def store_reservation(
    reservation_data: ReservationCreate,
    session: DbSession,
    today: Today,
) -> ReservationInfo:
    """Создает резерв после полной проверки по агенде.

    Raises:
        NotFoundError: 404 если агенда недоступна, клиент или услуга
            не найдены
        ValidationError: 400 если дата или время не подходят агенде
        ConflictError: 409 если интервал уже занят

    """
    try:
        return await reservation_service.create(
            session,
            reservation_data,
            today,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при создании резерва: {str(e)}')
        raise InternalError(f'Ошибка при создании резерва: {str(e)}')


@router.get(
    '/index',
    response_model=list[ReservationInfo],
    responses=ERROR_RESPONSES,
)
async def index_reservations(
    session: DbSession,
    user_id: Optional[UUID] = Query(
        None,
        alias='usuario_id',
        description='ID клиента',
    ),
    service_id: Optional[UUID] = Query(
        None,
        alias='servicio_id',
        description='ID услуги',
    ),
    agenda_id: Optional[UUID] = Query(None, description='ID агенды'),
    state: Optional[ReservationState] = Query(
        None,
        alias='estado',
        description='Статус резерва',
    ),
    date_from: Optional[date] = Query(
        None,
        alias='fecha_desde',
        description='Резервы не раньше даты',
    ),
    date_to: Optional[date] = Query(
        None,
        alias='fecha_hasta',
        description='Резервы не позже даты',
    ),
) -> list[ReservationInfo]:
    """Получает список резервов, самые поздние первыми."""
    try:
        return await reservation_service.list(
            session,
            user_id=user_id,
            service_id=service_id,
            agenda_id=agenda_id,
            state=state,
            date_from=date_from,
            date_to=date_to,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении списка резервов: {str(e)}')
        raise InternalError(f'Ошибка при получении списка резервов: {e}')


@router.get(
    '/show/{reservation_id}',
    response_model=ReservationInfo,
    responses=ERROR_RESPONSES,
)
async def show_reservation(
    reservation_id: UUID,
    session: DbSession,
) -> ReservationInfo:
    try:
        return await reservation_service.get(session, reservation_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении резерва {reservation_id}: {e}')
        raise InternalError(f'Ошибка при получении резерва: {str(e)}')


@router.post(
    '/update/{reservation_id}',
    response_model=ReservationInfo,
    responses=ERROR_RESPONSES,
)
@event_logger('Обновлена', 'Reservation')
async def update_reservation(
    reservation_id: UUID,
    reservation_data: ReservationUpdate,
    session: DbSession,
    today: Today,
) -> ReservationInfo:
    """Частично обновляет резерв; перенос проходит полную проверку."""
    try:
        return await reservation_service.update(
            session,
            reservation_id,
            reservation_data,
            today,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении резерва {reservation_id}: {e}')
        raise InternalError(f'Ошибка при обновлении резерва: {str(e)}')


@router.get(
    '/delete/{reservation_id}',
    response_model=StatusResponse,
    responses=ERROR_RESPONSES,
)
async def delete_reservation(
    reservation_id: UUID,
    session: DbSession,
) -> StatusResponse:
    """Отменяет резерв; его интервал снова становится свободным."""
    try:
        await reservation_service.cancel(session, reservation_id)
        return StatusResponse(message='Резерв отменён')
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при отмене резерва {reservation_id}: {e}')
        raise InternalError(f'Ошибка при отмене резерва: {str(e)}')


@router.get(
    '/confirmar/{reservation_id}',
    response_model=ReservationInfo,
    responses=ERROR_RESPONSES,
)
async def confirm_reservation(
    reservation_id: UUID,
    session: DbSession,
) -> ReservationInfo:
    try:
        return await reservation_service.confirm(session, reservation_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при подтверждении резерва {reservation_id}: {e}')
        raise InternalError(f'Ошибка при подтверждении резерва: {str(e)}')


@router.get(
    '/completar/{reservation_id}',
    response_model=ReservationInfo,
    responses=ERROR_RESPONSES,
)
async def complete_reservation(
    reservation_id: UUID,
    session: DbSession,
) -> ReservationInfo:
    try:
        return await reservation_service.complete(session, reservation_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при завершении резерва {reservation_id}: {e}')
        raise InternalError(f'Ошибка при завершении резерва: {str(e)}')


@router.get(
    '/usuario/{user_id}',
    response_model=list[ReservationInfo],
    responses=ERROR_RESPONSES,
)
async def user_reservations(
    user_id: UUID,
    session: DbSession,
) -> list[ReservationInfo]:
    """История резервов клиента."""
    try:
        return await reservation_service.list_by_user(session, user_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении резервов клиента {user_id}: {e}')
        raise InternalError(f'Ошибка при получении резервов клиента: {e}')


@router.post(
    '/verificar-disponibilidad',
    response_model=AvailabilityInfo,
    responses=ERROR_RESPONSES,
)
async def check_reservation_availability(
    check_data: ReservationAvailabilityCheck,
    session: DbSession,
) -> AvailabilityInfo:
    """Проверяет, свободен ли интервал агенды на дату.

    Резерв, заканчивающийся ровно в начале интервала, тоже считается
    помехой.
    """
    try:
        available = await reservation_service.check_availability(
            session,
            check_data,
        )
        return AvailabilityInfo(
            available=available,
            message=INTERVAL_FREE if available else INTERVAL_TAKEN,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка проверки доступности интервала: {str(e)}')
        raise InternalError(f'Ошибка проверки доступности интервала: {e}')
