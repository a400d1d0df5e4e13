from typing import Any, Generic, Iterable, Optional, Sequence, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import ColumnElement, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute, Load

from app.core.db import Base

ModelT = TypeVar('ModelT', bound=Base)
CreateSchemaT = TypeVar('CreateSchemaT', bound=BaseModel)
UpdateSchemaT = TypeVar('UpdateSchemaT', bound=BaseModel)


def range_overlap_clause(
    start_column: InstrumentedAttribute,
    end_column: InstrumentedAttribute,
    start: Any,
    end: Any,
) -> ColumnElement[bool]:
    """SQL-условие пересечения замкнутых диапазонов.

    Сохранённый диапазон ``[start_column, end_column]`` конфликтует с
    ``[start, end]``, если его начало или конец попадает внутрь, либо он
    целиком накрывает проверяемый диапазон.
    """
    return or_(
        start_column.between(start, end),
        end_column.between(start, end),
        and_(start_column <= start, end_column >= end),
    )


class CRUDBase(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    """Базовый класс для CRUD операций."""

    def __init__(self, model: Type[ModelT]) -> None:
        """Инициализация класса."""
        self.model = model

    async def get(
        self,
        session: AsyncSession,
        *predicates: Any,
        many: bool = False,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        options: Iterable[Load] = (),
        **filters: Any,
    ) -> list[ModelT] | ModelT | None:
        """Универсальная выборка по равенствам полей модели.

        get(..., field=value, ...).

        Параметры:
            session: AsyncSession.
            *predicates: произвольные SQLAlchemy-условия
            (например, Model.is_active.is_(True)).
            many: True вернуть список, False вернуть первый или None.
            order_by, limit, offset: необязательные параметры выдачи.
            options: ORM-опции загрузки (selectinload и т.п.).
            **filters: равенства по полям модели (field=value).

        Исключения:
            ValueError: если передан фильтр по несуществующему полю модели.
        """
        self._validate_filters(filters)
        conditions = [getattr(self.model, k) == v for k, v in filters.items()]
        if predicates:
            conditions.extend(predicates)

        stmt = select(self.model).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        if options:
            stmt = stmt.options(*options)

        res = await session.execute(stmt)
        return list(res.scalars().all()) if many else res.scalars().first()

    async def get_by_id(
        self,
        session: AsyncSession,
        obj_id: UUID,
    ) -> Optional[ModelT]:
        """Получение записи по первичному ключу."""
        return await session.get(self.model, obj_id)

    async def exists(self, session: AsyncSession, obj_id: UUID) -> bool:
        """Проверка существования записи по первичному ключу."""
        stmt = select(self.model.id).where(self.model.id == obj_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create_from_data(
        self,
        session: AsyncSession,
        data: dict[str, Any],
    ) -> ModelT:
        """Создание записи в БД из подготовленного словаря полей."""
        db_obj = self.model(**data)
        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def apply_update(
        self,
        session: AsyncSession,
        db_obj: ModelT,
        data: dict[str, Any],
    ) -> ModelT:
        """Обновление полей записи в БД."""
        for field, value in data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, db_obj: ModelT) -> ModelT:
        """Удаление записи из БД."""
        await session.delete(db_obj)
        await session.commit()
        return db_obj

    def _validate_filters(self, filters: dict[str, Any]) -> None:
        """Валидация фильтров, примененных к get()."""
        unknown = [k for k in filters if not hasattr(self.model, k)]
        if unknown:
            raise ValueError(
                'Некорректные поля фильтра для '
                f'{self.model.__name__}: {unknown}',
            )
