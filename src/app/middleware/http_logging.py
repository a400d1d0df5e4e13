import time
import uuid
from typing import Callable

from fastapi import Request, Response
from loguru import logger

from app.core.constants import (
    HTTP_LOG_TEMPLATE,
    MS_IN_SECOND,
    NOISE_PATHS,
    USER_ID_HEADER,
    USER_NAME_HEADER,
)


def _get_request_id(request: Request) -> str:
    """Возвращает X-Request-ID из заголовков или создаёт новый UUID."""
    return request.headers.get('X-Request-ID', str(uuid.uuid4()))


def _get_user_data(request: Request) -> tuple[str, str]:
    """Возвращает user_id и имя клиента из заголовков шлюза.

    Учётки ведутся вне сервиса, поэтому личность клиента приходит
    заголовками от внешнего шлюза. Без них запрос пишется как SYSTEM.
    """
    user_id = request.headers.get(USER_ID_HEADER) or '-'
    username = request.headers.get(USER_NAME_HEADER) or 'SYSTEM'
    return user_id, username


def _get_client_ip(request: Request) -> str:
    """Возвращает IP-адрес клиента."""
    xff = request.headers.get('x-forwarded-for')
    if xff:
        return xff.split(',')[0].strip()
    return request.client.host if request.client else '-'


def _choose_level(status: int) -> str:
    """Возвращает уровень лога в зависимости от кода ответа."""
    if status >= 500:
        return 'ERROR'
    if 400 <= status < 500:
        return 'WARNING'
    return 'INFO'


async def logging_middleware(
    request: Request,
    call_next: Callable,
) -> Response:
    """Middleware для логирования HTTP-запросов.

    Весь обработчик выполняется в контексте request_id, user_id и
    username, поэтому логи сервисов связываются с запросом. Итоговая
    строка содержит метод, путь, статус, время, IP и user-agent; уровень
    зависит от класса статуса. Пути из NOISE_PATHS пишутся только при
    ошибке сервера.
    """
    start = time.perf_counter()
    request_id = _get_request_id(request)
    user_id, username = _get_user_data(request)
    path = request.url.path

    with logger.contextualize(
        request_id=request_id,
        user_id=user_id,
        username=username,
    ):
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
        except Exception:
            logger.opt(exception=True).error(
                f'Необработанное исключение: {request.method} {path}',
            )
            raise
        finally:
            level = _choose_level(status)
            if level == 'ERROR' or path not in NOISE_PATHS:
                logger.log(
                    level,
                    HTTP_LOG_TEMPLATE,
                    method=request.method,
                    path=path,
                    status=status,
                    ms=(time.perf_counter() - start) * MS_IN_SECOND,
                    ip=_get_client_ip(request),
                    ua=request.headers.get('user-agent', '-'),
                )

    response.headers.setdefault('X-Request-ID', request_id)
    return response
