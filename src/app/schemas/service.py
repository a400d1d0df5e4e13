from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import StringConstraints

from app.core.constants import NAME_MAX_LENGTH
from app.utils.validators import normalize_text

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=NAME_MAX_LENGTH,
)
Duration = Annotated[int, Field(ge=1)]
Price = Annotated[Decimal, Field(ge=0, max_digits=8, decimal_places=2)]


class ServiceCreate(BaseModel):
    """Схема для создания услуги."""

    business_id: UUID
    name: Annotated[str, NameConstraint]
    description: Optional[str] = None
    duration: Duration
    price: Price
    is_active: bool = True

    @field_validator('description', mode='before')
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        """Удаляет лишние пробелы из описания."""
        return normalize_text(value)


class ServiceUpdate(BaseModel):
    """Схема для обновления услуги."""

    name: Optional[Annotated[str, NameConstraint]] = None
    description: Optional[str] = None
    duration: Optional[Duration] = None
    price: Optional[Price] = None
    is_active: Optional[bool] = None

    @field_validator('description', mode='before')
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        """Удаляет лишние пробелы и приводит пустые строки к None."""
        return normalize_text(value)


class ServiceInfo(BaseModel):
    """Полная схема услуги."""

    id: UUID
    business_id: UUID
    name: str
    description: Optional[str]
    duration: int
    price: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
