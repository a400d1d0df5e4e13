from .agenda import router as agenda_router
from .healthcheck import router as healthcheck_router
from .reservation import router as reservation_router
from .service import router as service_router

__all__ = [
    'service_router',
    'agenda_router',
    'reservation_router',
    'healthcheck_router',
]

routers = [
    service_router,
    agenda_router,
    reservation_router,
    healthcheck_router,
]
