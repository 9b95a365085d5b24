"""
Scheduled Maintenance Schemas
Pydantic models for recurring maintenance definitions and completion history.
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from propertech_scheduling.models.scheduled_maintenance import (
    MaintenanceCategory, MaintenanceFrequency, MaintenancePriority, MaintenanceTaskStatus,
)
from propertech_scheduling.services.recurrence import describe, recurrence_from
from propertech_scheduling.services.scheduled_maintenance_service import (
    AnnotatedDefinition, DueStatus,
)


# ─────────────────────────── Requests ───────────────────────────

class ScheduledMaintenanceCreate(BaseModel):
    property_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    frequency: MaintenanceFrequency
    interval: int = Field(1, ge=1)
    next_due: date
    estimated_cost: Optional[float] = Field(None, ge=0)
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    category: MaintenanceCategory
    assigned_to: Optional[str] = None
    notes: Optional[str] = None


class ScheduledMaintenanceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    frequency: Optional[MaintenanceFrequency] = None
    interval: Optional[int] = Field(None, ge=1)
    next_due: Optional[date] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
    priority: Optional[MaintenancePriority] = None
    category: Optional[MaintenanceCategory] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class ScheduledMaintenanceComplete(BaseModel):
    notes: Optional[str] = None
    cost: Optional[float] = Field(None, ge=0)


# ─────────────────────────── Responses ───────────────────────────

class MaintenanceTaskResponse(BaseModel):
    id: UUID
    scheduled_maintenance_id: UUID
    due_date: date
    completed_date: date
    status: MaintenanceTaskStatus
    notes: Optional[str] = None
    cost: Optional[float] = None
    performed_by: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class ScheduledMaintenanceResponse(BaseModel):
    id: UUID
    property_id: UUID
    title: str
    description: Optional[str] = None
    frequency: MaintenanceFrequency
    interval: int
    next_due: date
    last_performed: Optional[date] = None
    estimated_cost: Optional[float] = None
    priority: MaintenancePriority
    category: MaintenanceCategory
    is_active: bool
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AnnotatedScheduledMaintenanceResponse(ScheduledMaintenanceResponse):
    """Definition plus values derived at read time."""
    due_status: DueStatus
    schedule: str

    @classmethod
    def from_annotated(cls, annotated: AnnotatedDefinition, **extra):
        definition = annotated.definition
        base = ScheduledMaintenanceResponse.model_validate(definition).model_dump()
        return cls(
            **base,
            due_status=annotated.status,
            schedule=describe(recurrence_from(definition.frequency, definition.interval)),
            **extra,
        )


class ScheduledMaintenanceDetailResponse(AnnotatedScheduledMaintenanceResponse):
    tasks: List[MaintenanceTaskResponse] = []


class ScheduledMaintenanceListResponse(BaseModel):
    scheduledMaintenance: List[AnnotatedScheduledMaintenanceResponse]


class CompletionResponse(BaseModel):
    scheduledMaintenance: ScheduledMaintenanceResponse
    completedTask: MaintenanceTaskResponse


class CategoryCount(BaseModel):
    category: MaintenanceCategory
    count: int


class ScheduledMaintenanceStatsResponse(BaseModel):
    stats: List[CategoryCount]
