"""
Scheduled Maintenance Manager

Owns recurring maintenance definitions and their completion history.

Completing an occurrence is a single transaction that
  1. appends a ScheduledMaintenanceTask for the current next_due, and
  2. advances next_due with the recurrence engine and stamps last_performed.
Either both land or neither does.

Overdue / due soon / on track labels are derived from next_due and the
caller's clock on every read and are never stored.
"""
import logging
import uuid
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from propertech_scheduling.core.config import settings
from propertech_scheduling.core.deps import Actor
from propertech_scheduling.core.exceptions import (
    ForbiddenError, InvalidStateError, NotFoundError, ValidationError,
)
from propertech_scheduling.db.base import utcnow
from propertech_scheduling.models.scheduled_maintenance import (
    MaintenanceCategory, MaintenancePriority, MaintenanceTaskStatus,
    ScheduledMaintenance, ScheduledMaintenanceTask,
)
from propertech_scheduling.services.notification_service import (
    NotificationEvent, NotificationSink, default_notification_sink,
)
from propertech_scheduling.services.recurrence import (
    Recurrence, compute_next_due, recurrence_from, to_frequency,
)
from propertech_scheduling.services.resource_directory import ResourceDirectory
from propertech_scheduling.services.transactions import atomic

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "title", "description", "frequency", "interval", "next_due", "estimated_cost",
    "priority", "category", "assigned_to", "notes", "is_active",
}


class DueStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    ON_TRACK = "on_track"


def derive_due_status(
    next_due: date,
    today: date,
    window_days: Optional[int] = None,
) -> DueStatus:
    """Overdue before today; due soon from today through today + window_days inclusive."""
    window = timedelta(days=window_days if window_days is not None else settings.DUE_SOON_WINDOW_DAYS)
    if next_due < today:
        return DueStatus.OVERDUE
    if next_due <= today + window:
        return DueStatus.DUE_SOON
    return DueStatus.ON_TRACK


class AnnotatedDefinition(NamedTuple):
    definition: ScheduledMaintenance
    status: DueStatus


class ScheduledMaintenanceManager:
    def __init__(
        self,
        db: Session,
        resources: Optional[ResourceDirectory] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self.db = db
        self.resources = resources or ResourceDirectory(db)
        self.notifier = notifier or default_notification_sink()

    # ──────────────────────────── Commands ────────────────────────────

    def create_definition(
        self,
        actor: Actor,
        property_id: uuid.UUID,
        title: str,
        description: Optional[str],
        recurrence: Recurrence,
        next_due: date,
        estimated_cost: Optional[float],
        priority: MaintenancePriority,
        category: MaintenanceCategory,
        assigned_to: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScheduledMaintenance:
        now = now or utcnow()
        self._require_manager(actor)
        frequency, interval = to_frequency(recurrence)

        with atomic(self.db):
            if not self.resources.get(property_id).exists:
                raise NotFoundError("Property not found")

            definition = ScheduledMaintenance(
                property_id=property_id,
                title=title,
                description=description,
                frequency=frequency,
                interval=interval,
                next_due=next_due,
                estimated_cost=estimated_cost,
                priority=priority,
                category=category,
                assigned_to=assigned_to,
                notes=notes,
                is_active=True,
                created_by=actor.id,
                created_at=now,
                updated_at=now,
            )
            self.db.add(definition)
            self.db.flush()

        logger.info(
            f"[MAINTENANCE] Definition {definition.id} '{title}' created for property "
            f"{property_id}, first due {next_due}"
        )
        return definition

    def complete_occurrence(
        self,
        definition_id: uuid.UUID,
        actor: Actor,
        notes: Optional[str] = None,
        cost: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[ScheduledMaintenance, ScheduledMaintenanceTask]:
        now = now or utcnow()
        today = now.date()

        with atomic(self.db):
            definition = self._load(definition_id, for_update=True)
            self._require_manager(actor)
            if not definition.is_active:
                raise InvalidStateError("Scheduled maintenance is inactive")

            owner_id = self.resources.get(definition.property_id).owner_id
            due_date = definition.next_due
            task = ScheduledMaintenanceTask(
                scheduled_maintenance_id=definition.id,
                due_date=due_date,
                completed_date=today,
                status=MaintenanceTaskStatus.COMPLETED,
                notes=notes,
                cost=cost,
                performed_by=actor.id,
                created_at=now,
            )
            self.db.add(task)
            self.db.flush()

            recurrence = recurrence_from(definition.frequency, definition.interval)
            definition.next_due = compute_next_due(due_date, recurrence)
            definition.last_performed = today
            definition.updated_at = now
            self.db.flush()

        logger.info(
            f"[MAINTENANCE] Definition {definition_id} completed by {actor.id}: "
            f"due {due_date} -> next {definition.next_due}"
        )
        self.notifier.notify(
            owner_id or actor.id,
            NotificationEvent.MAINTENANCE_COMPLETED,
            {
                "scheduled_maintenance_id": str(definition_id),
                "task_id": str(task.id),
                "due_date": due_date.isoformat(),
                "next_due": definition.next_due.isoformat(),
            },
        )
        return definition, task

    def update_definition(
        self,
        definition_id: uuid.UUID,
        actor: Actor,
        fields: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> ScheduledMaintenance:
        now = now or utcnow()
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        with atomic(self.db):
            definition = self._load(definition_id, for_update=True)
            self._require_manager(actor)

            values = {k: v for k, v in fields.items() if v is not None}
            if "frequency" in values or "interval" in values:
                recurrence = recurrence_from(
                    values.get("frequency", definition.frequency),
                    values.get("interval", definition.interval),
                )
                values["frequency"], values["interval"] = to_frequency(recurrence)

            for key, value in values.items():
                setattr(definition, key, value)
            definition.updated_at = now
            self.db.flush()

        logger.info(f"[MAINTENANCE] Definition {definition_id} updated: {sorted(values)}")
        return definition

    def deactivate(
        self,
        definition_id: uuid.UUID,
        actor: Actor,
        now: Optional[datetime] = None,
    ) -> ScheduledMaintenance:
        """Stop recurrence. History is kept."""
        return self.update_definition(definition_id, actor, {"is_active": False}, now=now)

    def delete_definition(self, definition_id: uuid.UUID, actor: Actor) -> None:
        with atomic(self.db):
            definition = self._load(definition_id, for_update=True)
            self._require_manager(actor)
            # Task history goes with the definition (ORM cascade + ON DELETE CASCADE)
            self.db.delete(definition)
            self.db.flush()

        logger.info(f"[MAINTENANCE] Definition {definition_id} deleted by {actor.id}")

    # ──────────────────────────── Queries ────────────────────────────

    def list_definitions(
        self,
        actor: Actor,
        property_id: Optional[uuid.UUID] = None,
        category: Optional[MaintenanceCategory] = None,
        is_active: Optional[bool] = None,
        status: Optional[DueStatus] = None,
        now: Optional[datetime] = None,
    ) -> List[AnnotatedDefinition]:
        today = (now or utcnow()).date()

        query = select(ScheduledMaintenance).order_by(ScheduledMaintenance.next_due.asc())
        query = self._scope(query, actor)
        if property_id is not None:
            query = query.where(ScheduledMaintenance.property_id == property_id)
        if category is not None:
            query = query.where(ScheduledMaintenance.category == category)
        if is_active is not None:
            query = query.where(ScheduledMaintenance.is_active == is_active)

        annotated = [
            AnnotatedDefinition(d, derive_due_status(d.next_due, today))
            for d in self.db.execute(query).scalars()
        ]
        if status is not None:
            annotated = [a for a in annotated if a.status == status]
        return annotated

    def get_definition(
        self,
        definition_id: uuid.UUID,
        actor: Actor,
        now: Optional[datetime] = None,
    ) -> AnnotatedDefinition:
        today = (now or utcnow()).date()
        definition = self._load(definition_id)
        if not actor.is_manager and definition.property_id not in self.resources.occupied_by(actor.id):
            raise ForbiddenError("Access denied")
        return AnnotatedDefinition(definition, derive_due_status(definition.next_due, today))

    def stats_by_category(self, actor: Actor) -> List[Dict[str, Any]]:
        query = (
            select(ScheduledMaintenance.category, func.count(ScheduledMaintenance.id))
            .group_by(ScheduledMaintenance.category)
            .order_by(ScheduledMaintenance.category)
        )
        query = self._scope(query, actor)
        return [
            {"category": category, "count": count}
            for category, count in self.db.execute(query).all()
        ]

    # ──────────────────────────── Helpers ────────────────────────────

    @staticmethod
    def _require_manager(actor: Actor) -> None:
        if not actor.is_manager:
            raise ForbiddenError("Access denied")

    def _scope(self, query, actor: Actor):
        # Managers see every definition; tenants only those on properties they occupy
        if actor.is_manager:
            return query
        return query.where(ScheduledMaintenance.property_id.in_(self.resources.occupied_by(actor.id)))

    def _load(self, definition_id: uuid.UUID, for_update: bool = False) -> ScheduledMaintenance:
        query = select(ScheduledMaintenance).where(ScheduledMaintenance.id == definition_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        definition = self.db.execute(query).scalar_one_or_none()
        if definition is None:
            raise NotFoundError("Scheduled maintenance not found")
        return definition
