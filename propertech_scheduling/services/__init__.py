from propertech_scheduling.services import (
    availability_service,
    follow_up_service,
    notification_service,
    recurrence,
    scheduled_maintenance_service,
    viewing_service,
)

__all__ = [
    "availability_service",
    "follow_up_service",
    "notification_service",
    "recurrence",
    "scheduled_maintenance_service",
    "viewing_service",
]
