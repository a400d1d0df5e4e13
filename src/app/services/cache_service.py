import json
import time
from datetime import date
from typing import Any, Optional
from uuid import UUID

from loguru import logger
from redis.asyncio import Redis

from app.core.config import settings
from app.core.constants import (
    MS_IN_SECOND,
    SLOTS_CACHE_KEY,
    SLOTS_CACHE_PATTERN,
)


class CacheService:
    """Кеш листингов слотов в Redis.

    Кеш необязателен: без подключения чтение всегда промах, а запись и
    сброс ничего не делают и возвращают False. Ошибки Redis пишутся в
    лог и не доходят до запроса.
    """

    def __init__(self) -> None:
        """Кеш создаётся отключённым, подключение в lifespan."""
        self.redis: Optional[Redis] = None
        self.ttl = settings.REDIS_CACHE_TTL

    @property
    def is_connected(self) -> bool:
        return self.redis is not None

    async def connect(self) -> None:
        """Установка подключения к Redis."""
        try:
            self.redis = Redis.from_url(
                settings.redis_url,
                encoding='utf-8',
                decode_responses=True,
            )
            await self.redis.ping()
            logger.info('Успешное подключение к Redis')
        except Exception as e:
            logger.error(
                f'Redis недоступен, кеш слотов отключён: {str(e)}',
            )
            self.redis = None

    async def disconnect(self) -> None:
        """Закрытие подключения к Redis."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info('Отключение от Redis')

    async def ping(self) -> bool:
        """Проверка доступности Redis для healthcheck."""
        if not self.redis:
            return False
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error(f'Redis не отвечает: {str(e)}')
            return False

    async def read(self, key: str, context: str = '') -> Optional[Any]:
        """Читает JSON по ключу, попадание и промах пишутся в debug."""
        if not self.redis:
            return None
        started = time.perf_counter()
        try:
            raw: Optional[str] = await self.redis.get(key)
        except Exception as e:
            logger.error(f'Ошибка чтения из кеша {key}: {str(e)}')
            return None
        elapsed = (time.perf_counter() - started) * MS_IN_SECOND
        if raw is None:
            logger.debug(f'Кеш промах: {key} | {elapsed:.2f}мс | {context}')
            return None
        logger.debug(
            f'Кеш попадание: {key} | {len(raw)} байт | '
            f'{elapsed:.2f}мс | {context}',
        )
        return json.loads(raw)

    async def write(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        """Сохраняет значение как JSON с временем жизни."""
        if not self.redis:
            return False
        try:
            await self.redis.setex(
                key,
                ttl or self.ttl,
                json.dumps(value, default=str),
            )
            return True
        except Exception as e:
            logger.error(f'Ошибка записи в кеш {key}: {str(e)}')
            return False

    async def drop(self, *keys: str) -> bool:
        """Удаляет ключи, отсутствующие пропускаются."""
        if not self.redis or not keys:
            return False
        try:
            await self.redis.delete(*keys)
            return True
        except Exception as e:
            logger.error(f'Ошибка удаления из кеша: {str(e)}')
            return False

    async def drop_pattern(self, pattern: str) -> bool:
        """Удаляет все ключи по glob-шаблону через SCAN."""
        if not self.redis:
            return False
        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern)]
        except Exception as e:
            logger.error(f'Ошибка поиска ключей {pattern}: {str(e)}')
            return False
        if keys:
            logger.info(f'Сброс кеша {pattern}: {len(keys)} ключей')
        return await self.drop(*keys) if keys else True

    @staticmethod
    def slots_key(agenda_id: UUID, day: date) -> str:
        return SLOTS_CACHE_KEY.format(agenda_id=agenda_id, day=day.isoformat())

    async def get_slots(
        self,
        agenda_id: UUID,
        day: date,
    ) -> Optional[list[dict]]:
        """Слоты агенды на день из кеша."""
        return await self.read(
            self.slots_key(agenda_id, day),
            context='слоты агенды',
        )

    async def set_slots(
        self,
        agenda_id: UUID,
        day: date,
        slots: list[dict],
    ) -> bool:
        """Кеширует слоты агенды на день."""
        return await self.write(self.slots_key(agenda_id, day), slots)

    async def clear_day_slots(self, agenda_id: UUID, day: date) -> None:
        """Сброс слотов одного дня после записи резерва."""
        await self.drop(self.slots_key(agenda_id, day))

    async def clear_agenda_slots(self, agenda_id: UUID) -> None:
        """Сброс всех дней агенды после изменения её правил."""
        await self.drop_pattern(
            SLOTS_CACHE_PATTERN.format(agenda_id=agenda_id),
        )


cache_service = CacheService()
