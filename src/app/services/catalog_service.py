from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Service
from app.repositories import ServiceRepository, service_repository
from app.schemas.service import ServiceCreate, ServiceUpdate

SERVICE_NOT_FOUND = 'Услуга не найдена'
BUSINESS_NOT_FOUND = 'Бизнес не найден'
NAME_TAKEN = 'Услуга с таким названием уже есть у этого бизнеса'


class CatalogService:
    """Каталог услуг бизнеса."""

    def __init__(
        self,
        services: ServiceRepository = service_repository,
    ) -> None:
        self.services = services

    async def get(self, session: AsyncSession, service_id: UUID) -> Service:
        service = await self.services.get_by_id(session, service_id)
        if service is None:
            logger.warning(f'Услуга {service_id} не найдена')
            raise NotFoundError(SERVICE_NOT_FOUND)
        return service

    async def list(
        self,
        session: AsyncSession,
        *,
        business_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[Service]:
        return await self.services.get_filtered(
            session,
            business_id=business_id,
            is_active=is_active,
            search=search,
        )

    async def create(
        self,
        session: AsyncSession,
        data: ServiceCreate,
    ) -> Service:
        if not await self.services.business_exists(session, data.business_id):
            logger.warning(f'Бизнес {data.business_id} не найден')
            raise NotFoundError(BUSINESS_NOT_FOUND)
        await self._ensure_name_free(session, data.business_id, data.name)
        return await self.services.create_from_data(session, data.model_dump())

    async def update(
        self,
        session: AsyncSession,
        service_id: UUID,
        data: ServiceUpdate,
    ) -> Service:
        service = await self.get(session, service_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == 'description'
        }
        if 'name' in changes and changes['name'] != service.name:
            await self._ensure_name_free(
                session,
                service.business_id,
                changes['name'],
                exclude_id=service.id,
            )
        return await self.services.apply_update(session, service, changes)

    async def delete(self, session: AsyncSession, service_id: UUID) -> Service:
        """Удаляет услугу насовсем; агенды и резервы уходят каскадом."""
        service = await self.get(session, service_id)
        await self.services.delete(session, service)
        logger.info(f'Услуга {service_id} удалена')
        return service

    async def _ensure_name_free(
        self,
        session: AsyncSession,
        business_id: UUID,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        duplicate = await self.services.get_by_name(
            session,
            business_id,
            name,
            exclude_id=exclude_id,
        )
        if duplicate is not None:
            logger.warning(f'Дубликат услуги "{name}" у бизнеса {business_id}')
            raise ConflictError(NAME_TAKEN, {'name': NAME_TAKEN})


catalog_service = CatalogService()
