from typing import Dict

from fastapi import APIRouter
from loguru import logger
from sqlalchemy import text

from app.core.db import DbSession
from app.core.dependencies import CacheServiceDep
from app.services.cache_service import CacheService

router = APIRouter(prefix='/healthcheck', tags=['Healthcheck'])


@router.get('/db')
async def db_health(session: DbSession) -> Dict[str, str]:
    """Проверка состояния БД."""
    try:
        await session.execute(text('SELECT 1'))
        logger.debug('Проверка БД: успешно')
        return {'status': 'ok'}
    except Exception as e:
        logger.error(f'Ошибка проверки БД: {str(e)}')
        return {'status': 'error', 'details': str(e)}


@router.get('/redis')
async def redis_health(
    cache: CacheService = CacheServiceDep,
) -> Dict[str, str]:
    """Проверка состояния Redis."""
    if not cache.is_connected:
        logger.error('Redis не подключен')
        return {'status': 'error', 'details': 'Redis не подключен'}
    if await cache.ping():
        logger.debug('Проверка Redis: успешно')
        return {'status': 'ok'}
    return {'status': 'error', 'details': 'Redis не отвечает'}
