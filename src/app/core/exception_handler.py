from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppError
from app.utils.http import build_error

VALIDATION_MESSAGE = 'Ошибка валидации'


def _field_name(loc: tuple) -> str:
    """Имя поля из loc ошибки pydantic без префикса 'body'/'query'."""
    parts = [str(part) for part in loc if part not in ('body', 'query')]
    return '.'.join(parts) or '__root__'


def _format_detail(detail: Any) -> tuple[str, Optional[dict[str, str]]]:
    """Разбирает detail HTTPException в сообщение и ошибки по полям."""
    if isinstance(detail, dict):
        message = detail.get('message') or detail.get('detail') or str(detail)
        return str(message), detail.get('errors')
    if isinstance(detail, list):
        return '; '.join(str(item) for item in detail), None
    return (str(detail) if detail else ''), None


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Перехватывает ошибки валидации и возвращает ошибки по полям."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = _field_name(tuple(error.get('loc', ())))
        errors.setdefault(field, error['msg'].replace('Value error, ', ''))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=build_error(
            VALIDATION_MESSAGE,
            status.HTTP_422_UNPROCESSABLE_CONTENT,
            errors,
        ),
    )


async def app_exception_handler(
    request: Request,
    exc: AppError,
) -> JSONResponse:
    """Превращает доменную ошибку в структурированный ответ."""
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error(exc.message, exc.status_code, exc.errors),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Унифицирует формат ответа для HTTP исключений."""
    message, errors = _format_detail(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error(message, exc.status_code, errors),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Последний рубеж: неожиданная ошибка превращается в ответ 500."""
    logger.opt(exception=exc).error(
        f'Необработанная ошибка: {request.method} {request.url.path}',
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error(
            f'Внутренняя ошибка сервера: {exc}',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )
