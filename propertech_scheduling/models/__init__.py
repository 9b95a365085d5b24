# Import all models in correct order to avoid circular imports
from propertech_scheduling.models.property import Property, property_occupants
from propertech_scheduling.models.viewing import (
    Viewing, ViewingStatus, ACTIVE_VIEWING_STATUSES,
    ContactPreference, FollowUp, FollowUpType, FollowUpStatus,
)
from propertech_scheduling.models.scheduled_maintenance import (
    ScheduledMaintenance, ScheduledMaintenanceTask,
    MaintenanceFrequency, MaintenancePriority, MaintenanceCategory,
    MaintenanceTaskStatus,
)

__all__ = [
    "Property",
    "property_occupants",
    "Viewing",
    "ViewingStatus",
    "ACTIVE_VIEWING_STATUSES",
    "ContactPreference",
    "FollowUp",
    "FollowUpType",
    "FollowUpStatus",
    "ScheduledMaintenance",
    "ScheduledMaintenanceTask",
    "MaintenanceFrequency",
    "MaintenancePriority",
    "MaintenanceCategory",
    "MaintenanceTaskStatus",
]
