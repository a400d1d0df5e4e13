from typing import Literal, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Базовая схема ответа с описанием ошибки."""

    status: Literal['error'] = 'error'
    code: int
    message: str
    errors: Optional[dict[str, str]] = None


class StatusResponse(BaseModel):
    """Ответ на операцию без тела сущности (деактивация, отмена и т.п.)."""

    status: Literal['success'] = 'success'
    message: str


class AvailabilityInfo(BaseModel):
    """Результат проверки доступности диапазона дат или времени."""

    status: Literal['success'] = 'success'
    available: bool
    message: str
