"""
Scheduled Maintenance Routes - recurring maintenance definitions

Endpoints:
  GET    /api/scheduled-maintenance                   → list definitions with derived status
  GET    /api/scheduled-maintenance/stats/overview    → definition counts per category
  GET    /api/scheduled-maintenance/{id}              → one definition with its task history
  POST   /api/scheduled-maintenance                   → create a definition (manager)
  PUT    /api/scheduled-maintenance/{id}              → update a definition (manager)
  POST   /api/scheduled-maintenance/{id}/deactivate   → stop recurrence (manager)
  POST   /api/scheduled-maintenance/{id}/complete     → record a completion and advance next_due
  DELETE /api/scheduled-maintenance/{id}              → delete a definition and its history
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from propertech_scheduling.core.deps import Actor, get_current_actor
from propertech_scheduling.database import get_db
from propertech_scheduling.db.base import utcnow
from propertech_scheduling.models.scheduled_maintenance import MaintenanceCategory
from propertech_scheduling.schemas.scheduled_maintenance import (
    AnnotatedScheduledMaintenanceResponse, CompletionResponse, MaintenanceTaskResponse,
    ScheduledMaintenanceComplete, ScheduledMaintenanceCreate, ScheduledMaintenanceDetailResponse,
    ScheduledMaintenanceListResponse, ScheduledMaintenanceResponse,
    ScheduledMaintenanceStatsResponse, ScheduledMaintenanceUpdate,
)
from propertech_scheduling.services.notification_service import (
    NotificationSink, get_notification_sink,
)
from propertech_scheduling.services.recurrence import recurrence_from
from propertech_scheduling.services.scheduled_maintenance_service import (
    DueStatus, ScheduledMaintenanceManager,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Scheduled Maintenance"])


def get_maintenance_manager(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink),
) -> ScheduledMaintenanceManager:
    return ScheduledMaintenanceManager(db, notifier=notifier)


# ==================== QUERIES ====================

@router.get("", response_model=ScheduledMaintenanceListResponse)
def list_scheduled_maintenance(
    property_id: Optional[UUID] = None,
    category: Optional[MaintenanceCategory] = None,
    is_active: Optional[bool] = None,
    due_status: Optional[DueStatus] = Query(None, alias="status"),
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    """Definitions visible to the caller, soonest due first."""
    annotated = manager.list_definitions(
        actor,
        property_id=property_id,
        category=category,
        is_active=is_active,
        status=due_status,
        now=utcnow(),
    )
    return {
        "scheduledMaintenance": [
            AnnotatedScheduledMaintenanceResponse.from_annotated(a) for a in annotated
        ]
    }


# Declared before /{definition_id} so "stats" is not parsed as an id
@router.get("/stats/overview", response_model=ScheduledMaintenanceStatsResponse)
def scheduled_maintenance_stats(
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    return {"stats": manager.stats_by_category(actor)}


@router.get("/{definition_id}", response_model=ScheduledMaintenanceDetailResponse)
def get_scheduled_maintenance(
    definition_id: UUID,
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    annotated = manager.get_definition(definition_id, actor, now=utcnow())
    return ScheduledMaintenanceDetailResponse.from_annotated(
        annotated,
        tasks=[MaintenanceTaskResponse.model_validate(t) for t in annotated.definition.tasks],
    )


# ==================== COMMANDS ====================

@router.post("", response_model=ScheduledMaintenanceResponse, status_code=status.HTTP_201_CREATED)
def create_scheduled_maintenance(
    request: ScheduledMaintenanceCreate,
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    return manager.create_definition(
        actor,
        request.property_id,
        request.title,
        request.description,
        recurrence_from(request.frequency, request.interval),
        request.next_due,
        request.estimated_cost,
        request.priority,
        request.category,
        assigned_to=request.assigned_to,
        notes=request.notes,
        now=utcnow(),
    )


@router.put("/{definition_id}", response_model=ScheduledMaintenanceResponse)
def update_scheduled_maintenance(
    definition_id: UUID,
    request: ScheduledMaintenanceUpdate,
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    return manager.update_definition(
        definition_id, actor, request.model_dump(exclude_unset=True), now=utcnow()
    )


@router.post("/{definition_id}/deactivate", response_model=ScheduledMaintenanceResponse)
def deactivate_scheduled_maintenance(
    definition_id: UUID,
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    return manager.deactivate(definition_id, actor, now=utcnow())


@router.post("/{definition_id}/complete", response_model=CompletionResponse)
def complete_scheduled_maintenance(
    definition_id: UUID,
    request: Optional[ScheduledMaintenanceComplete] = Body(None),
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    """Record the current occurrence as done and roll next_due forward."""
    request = request or ScheduledMaintenanceComplete()
    definition, task = manager.complete_occurrence(
        definition_id, actor, notes=request.notes, cost=request.cost, now=utcnow()
    )
    return {
        "scheduledMaintenance": ScheduledMaintenanceResponse.model_validate(definition),
        "completedTask": MaintenanceTaskResponse.model_validate(task),
    }


@router.delete("/{definition_id}")
def delete_scheduled_maintenance(
    definition_id: UUID,
    manager: ScheduledMaintenanceManager = Depends(get_maintenance_manager),
    actor: Actor = Depends(get_current_actor),
):
    manager.delete_definition(definition_id, actor)
    return {"success": True, "message": "Scheduled maintenance deleted successfully"}
