from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Business, Service
from app.repositories.base import CRUDBase
from app.schemas.service import ServiceCreate, ServiceUpdate


class ServiceRepository(CRUDBase[Service, ServiceCreate, ServiceUpdate]):
    """Репозиторий для операций с услугами."""

    def __init__(self) -> None:
        """Инициализация репозитория услуг."""
        super().__init__(Service)

    async def get_filtered(
        self,
        session: AsyncSession,
        *,
        business_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[Service]:
        """Получает услуги по фильтрам, по алфавиту."""
        conditions = []
        if business_id is not None:
            conditions.append(Service.business_id == business_id)
        if is_active is not None:
            conditions.append(Service.is_active.is_(is_active))
        if search:
            pattern = f'%{search}%'
            conditions.append(
                or_(
                    Service.name.ilike(pattern),
                    Service.description.ilike(pattern),
                ),
            )
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=[Service.name.asc()],
        )

    async def get_by_name(
        self,
        session: AsyncSession,
        business_id: UUID,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> Optional[Service]:
        """Ищет услугу бизнеса с таким же именем."""
        conditions = []
        if exclude_id:
            conditions.append(Service.id != exclude_id)
        return await self.get(
            session,
            *conditions,
            business_id=business_id,
            name=name,
        )

    async def business_exists(
        self,
        session: AsyncSession,
        business_id: UUID,
    ) -> bool:
        """Проверяет, что бизнес-владелец существует."""
        return await session.get(Business, business_id) is not None


service_repository = ServiceRepository()
