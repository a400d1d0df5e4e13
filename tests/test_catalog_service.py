"""Тесты каталога услуг."""

import uuid
from decimal import Decimal

import pytest

from app.core.exceptions import ConflictError, NotFoundError
from app.schemas.service import ServiceCreate, ServiceUpdate


class TestCatalog:
    """Создание, обновление и удаление услуг"""

    async def test_create(self, catalog_service, service):
        created = await catalog_service.create(
            None,
            ServiceCreate(
                business_id=service.business_id,
                name='  Маникюр ',
                description='   ',
                duration=45,
                price=Decimal('30.00'),
            ),
        )

        assert created.name == 'Маникюр'
        assert created.description is None
        assert created.is_active is True

    async def test_unknown_business(self, catalog_service):
        with pytest.raises(NotFoundError):
            await catalog_service.create(
                None,
                ServiceCreate(
                    business_id=uuid.uuid4(),
                    name='Маникюр',
                    duration=45,
                    price=Decimal('30.00'),
                ),
            )

    async def test_duplicate_name(self, catalog_service, service):
        with pytest.raises(ConflictError) as exc_info:
            await catalog_service.create(
                None,
                ServiceCreate(
                    business_id=service.business_id,
                    name=service.name,
                    duration=30,
                    price=Decimal('10.00'),
                ),
            )
        assert 'name' in exc_info.value.errors

    async def test_rename_onto_existing(
        self,
        catalog_service,
        services_repo,
        service,
    ):
        other = services_repo.add(
            business_id=service.business_id,
            name='Окрашивание',
            description=None,
            duration=60,
            price=Decimal('50.00'),
        )

        with pytest.raises(ConflictError):
            await catalog_service.update(
                None,
                other.id,
                ServiceUpdate(name=service.name),
            )

    async def test_update_keeps_own_name(self, catalog_service, service):
        updated = await catalog_service.update(
            None,
            service.id,
            ServiceUpdate(name=service.name, price=Decimal('27.50')),
        )
        assert updated.price == Decimal('27.50')

    async def test_delete(self, catalog_service, services_repo, service):
        await catalog_service.delete(None, service.id)

        assert service.id not in services_repo.rows
        with pytest.raises(NotFoundError):
            await catalog_service.get(None, service.id)
