from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status
from loguru import logger

from app.core.db import DbSession
from app.core.exceptions import AppError, InternalError
from app.schemas.common import ErrorResponse, StatusResponse
from app.schemas.service import ServiceCreate, ServiceInfo, ServiceUpdate
from app.services.catalog_service import catalog_service
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/servicios', tags=['Услуги'])

ERROR_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    status.HTTP_409_CONFLICT: {'model': ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
}


@router.post(
    '/store',
    response_model=ServiceInfo,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@event_logger('Создана', 'Service')
async def store_service(
    service_data: ServiceCreate,
    session: DbSession,
) -> ServiceInfo:
    """Создает услугу бизнеса; название уникально в пределах бизнеса."""
    try:
        return await catalog_service.create(session, service_data)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при создании услуги: {str(e)}')
        raise InternalError(f'Ошибка при создании услуги: {str(e)}')


@router.get(
    '/index',
    response_model=list[ServiceInfo],
    responses=ERROR_RESPONSES,
)
async def index_services(
    session: DbSession,
    business_id: Optional[UUID] = Query(
        None,
        alias='negocio_id',
        description='ID бизнеса',
    ),
    is_active: Optional[bool] = Query(
        None,
        alias='activo',
        description='Только активные или только неактивные',
    ),
    search: Optional[str] = Query(
        None,
        alias='buscar',
        description='Поиск по названию и описанию',
    ),
) -> list[ServiceInfo]:
    try:
        return await catalog_service.list(
            session,
            business_id=business_id,
            is_active=is_active,
            search=search,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении списка услуг: {str(e)}')
        raise InternalError(f'Ошибка при получении списка услуг: {str(e)}')


@router.get(
    '/show/{service_id}',
    response_model=ServiceInfo,
    responses=ERROR_RESPONSES,
)
async def show_service(service_id: UUID, session: DbSession) -> ServiceInfo:
    try:
        return await catalog_service.get(session, service_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при получении услуги {service_id}: {str(e)}')
        raise InternalError(f'Ошибка при получении услуги: {str(e)}')


@router.post(
    '/update/{service_id}',
    response_model=ServiceInfo,
    responses=ERROR_RESPONSES,
)
@event_logger('Обновлена', 'Service')
async def update_service(
    service_id: UUID,
    service_data: ServiceUpdate,
    session: DbSession,
) -> ServiceInfo:
    try:
        return await catalog_service.update(session, service_id, service_data)
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении услуги {service_id}: {str(e)}')
        raise InternalError(f'Ошибка при обновлении услуги: {str(e)}')


@router.get(
    '/delete/{service_id}',
    response_model=StatusResponse,
    responses=ERROR_RESPONSES,
)
async def delete_service(
    service_id: UUID,
    session: DbSession,
) -> StatusResponse:
    """Удаляет услугу вместе с её агендами и резервами."""
    try:
        await catalog_service.delete(session, service_id)
        return StatusResponse(message='Услуга удалена')
    except AppError:
        raise
    except Exception as e:
        logger.error(f'Ошибка при удалении услуги {service_id}: {str(e)}')
        raise InternalError(f'Ошибка при удалении услуги: {str(e)}')
