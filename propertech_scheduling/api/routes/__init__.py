from propertech_scheduling.api.routes.bookings import router as bookings_router
from propertech_scheduling.api.routes.scheduled_maintenance import router as scheduled_maintenance_router

__all__ = [
    "bookings_router",
    "scheduled_maintenance_router",
]
