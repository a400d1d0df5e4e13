import json
from functools import wraps
from typing import Any, Callable, Optional

from loguru import logger

from app.core.exceptions import AppError


def _payload(kwargs: dict[str, Any], only_set: bool) -> Optional[dict]:
    """Первое тело запроса среди аргументов эндпоинта, в виде словаря."""
    for value in kwargs.values():
        if hasattr(value, 'model_dump'):
            return value.model_dump(
                mode='json',
                exclude_none=True,
                exclude_unset=only_set,
            )
    return None


def event_logger(
    event_type: str,
    table_name: str,
    only_set: bool = True,
) -> Callable:
    """Декоратор для логирования успешных записей в таблицу.

    После успешного выполнения эндпоинта пишет в лог id записи и
    параметры запроса. Отказ по бизнес-правилу логируется как
    предупреждение, любая другая ошибка как ошибка; исключение
    пробрасывается дальше.

    Args:
        event_type: Тип события ('Создана', 'Обновлена').
        table_name: Название таблицы, над которой выполняется операция.
        only_set: Сериализовать только явно заданные поля.

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            parameters = _payload(kwargs, only_set)
            try:
                result = await func(*args, **kwargs)
            except AppError as e:
                logger.warning(
                    f'Операция с таблицей "{table_name}" отклонена: '
                    f'{e.message}',
                )
                raise
            except Exception:
                logger.error(
                    f'Произошла ошибка при выполнении операции с '
                    f'таблицей "{table_name}"',
                )
                raise
            record_id = getattr(result, 'id', None)
            formatted = json.dumps(parameters, ensure_ascii=False, indent=4)
            logger.info(
                f'{event_type} запись {record_id} в таблице "{table_name}", '
                f'с параметрами:\n{formatted}',
            )
            return result

        return wrapper

    return decorator
