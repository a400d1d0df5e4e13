from typing import Optional

from fastapi import status


class AppError(Exception):
    """Базовая ошибка предметной области с HTTP-кодом ответа."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        errors: Optional[dict[str, str]] = None,
    ) -> None:
        """Сохраняет сообщение и (опционально) ошибки по полям."""
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(AppError):
    """Некорректные или отсутствующие поля запроса."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """Сущность с указанным идентификатором не найдена."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Пересечение агенд, занятый интервал или дубликат имени."""

    status_code = status.HTTP_409_CONFLICT


class StateError(AppError):
    """Недопустимый переход состояния."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(AppError):
    """Непредвиденная ошибка; сообщение содержит исходную причину."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
