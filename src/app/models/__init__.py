from .agenda import Agenda
from .business import Business
from .reservation import Reservation
from .service import Service
from .user import User

__all__ = [
    'Business',
    'Service',
    'Agenda',
    'Reservation',
    'User',
]
