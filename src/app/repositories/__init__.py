from .agenda import AgendaRepository, agenda_repository
from .base import CRUDBase
from .reservation import ReservationRepository, reservation_repository
from .service import ServiceRepository, service_repository
from .user import UserRepository, user_repository

__all__ = [
    'CRUDBase',
    'AgendaRepository',
    'agenda_repository',
    'ReservationRepository',
    'reservation_repository',
    'ServiceRepository',
    'service_repository',
    'UserRepository',
    'user_repository',
]
