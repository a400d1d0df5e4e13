"""Модуль схем Pydantic для валидации и сериализации данных.

Содержит схемы для сущностей системы:
- Услуги (Service)
- Агенды (Agenda) и сгенерированные слоты (Slot)
- Резервы (Reservation)
- Общие ответы об ошибках и доступности

Все схемы используют UUID для идентификаторов и поддерживают
валидацию данных.
"""

from .agenda import (
    AgendaAvailabilityCheck,
    AgendaCreate,
    AgendaInfo,
    AgendaUpdate,
    AgendaWithSlots,
)
from .common import AvailabilityInfo, ErrorResponse, StatusResponse
from .reservation import (
    ReservationAvailabilityCheck,
    ReservationCreate,
    ReservationInfo,
    ReservationUpdate,
)
from .service import ServiceCreate, ServiceInfo, ServiceUpdate
from .slot import SlotInfo

__all__ = [
    'AgendaAvailabilityCheck',
    'AgendaCreate',
    'AgendaInfo',
    'AgendaUpdate',
    'AgendaWithSlots',
    'AvailabilityInfo',
    'ErrorResponse',
    'StatusResponse',
    'ReservationAvailabilityCheck',
    'ReservationCreate',
    'ReservationInfo',
    'ReservationUpdate',
    'ServiceCreate',
    'ServiceInfo',
    'ServiceUpdate',
    'SlotInfo',
]
