from datetime import date
from typing import Annotated

from fastapi import Depends

from app.services.cache_service import CacheService, cache_service


async def get_cache_service() -> CacheService:
    """Зависимость для получения сервиса кеширования."""
    return cache_service


def get_today() -> date:
    """Текущая дата; в тестах подменяется через dependency_overrides."""
    return date.today()


CacheServiceDep = Depends(get_cache_service)
Today = Annotated[date, Depends(get_today)]
