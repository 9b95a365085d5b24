import uuid
from datetime import date, datetime, timezone

import pytest
from conftest import add_occupant, make_property
from sqlalchemy.exc import OperationalError

from propertech_scheduling.core.exceptions import (
    ForbiddenError, InternalError, InvalidStateError, NotFoundError, ValidationError,
)
from propertech_scheduling.models.scheduled_maintenance import (
    MaintenanceCategory, MaintenanceFrequency, MaintenancePriority,
    ScheduledMaintenance, ScheduledMaintenanceTask,
)
from propertech_scheduling.services import scheduled_maintenance_service
from propertech_scheduling.services.notification_service import NotificationEvent
from propertech_scheduling.services.recurrence import Custom, Monthly, Quarterly, Yearly
from propertech_scheduling.services.scheduled_maintenance_service import DueStatus, derive_due_status

TODAY = date(2024, 3, 1)
NOW = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


def create(maintenance, actor, prop, recurrence=None, next_due=date(2024, 1, 31),
           category=MaintenanceCategory.HVAC, title="Filter change"):
    return maintenance.create_definition(
        actor,
        prop.id,
        title,
        None,
        recurrence or Monthly(1),
        next_due,
        120.0,
        MaintenancePriority.MEDIUM,
        category,
        now=NOW,
    )


def task_count(db):
    return db.query(ScheduledMaintenanceTask).count()


# ==================== Create ====================

def test_create_definition(maintenance, manager, listing):
    definition = create(maintenance, manager, listing, recurrence=Quarterly(2))

    assert definition.is_active
    assert definition.frequency == MaintenanceFrequency.QUARTERLY
    assert definition.interval == 2
    assert definition.created_by == manager.id
    assert definition.last_performed is None


def test_tenant_cannot_create_definition(maintenance, tenant, listing):
    with pytest.raises(ForbiddenError):
        create(maintenance, tenant, listing)


def test_create_for_unknown_property(maintenance, manager):
    ghost = type("Ghost", (), {"id": uuid.uuid4()})()

    with pytest.raises(NotFoundError):
        create(maintenance, manager, ghost)


# ==================== Complete ====================

def test_complete_records_task_and_advances_with_clamping(db, maintenance, manager, listing, notifier):
    definition = create(maintenance, manager, listing, next_due=date(2024, 1, 31))

    updated, task = maintenance.complete_occurrence(
        definition.id, manager, notes="Replaced filters", cost=95.5, now=NOW
    )

    assert task.due_date == date(2024, 1, 31)
    assert task.completed_date == TODAY
    assert task.performed_by == manager.id
    assert task.cost == 95.5
    assert updated.next_due == date(2024, 2, 29)
    assert updated.last_performed == TODAY
    assert task_count(db) == 1
    user_id, kind, payload = notifier.events[-1]
    assert (user_id, kind) == (manager.id, NotificationEvent.MAINTENANCE_COMPLETED)
    assert payload["next_due"] == "2024-02-29"


def test_repeated_completion_chains_from_stored_next_due(db, maintenance, manager, listing):
    definition = create(maintenance, manager, listing, next_due=date(2024, 1, 31))

    maintenance.complete_occurrence(definition.id, manager, now=NOW)
    updated, task = maintenance.complete_occurrence(definition.id, manager, now=NOW)

    assert task.due_date == date(2024, 2, 29)
    assert updated.next_due == date(2024, 3, 29)
    assert task_count(db) == 2


@pytest.mark.parametrize("recurrence,expected", [
    (Yearly(1), date(2025, 1, 31)),
    (Custom(14), date(2024, 2, 14)),
])
def test_completion_uses_definition_recurrence(maintenance, manager, listing, recurrence, expected):
    definition = create(maintenance, manager, listing, recurrence=recurrence)

    updated, _ = maintenance.complete_occurrence(definition.id, manager, now=NOW)

    assert updated.next_due == expected


def test_failed_recompute_rolls_back_task(monkeypatch, db, maintenance, manager, listing):
    definition = create(maintenance, manager, listing, next_due=date(2024, 1, 31))

    def explode(current, recurrence):
        raise RuntimeError("recurrence engine down")

    monkeypatch.setattr(scheduled_maintenance_service, "compute_next_due", explode)

    with pytest.raises(RuntimeError):
        maintenance.complete_occurrence(definition.id, manager, now=NOW)

    assert task_count(db) == 0
    assert db.get(ScheduledMaintenance, definition.id).next_due == date(2024, 1, 31)
    assert db.get(ScheduledMaintenance, definition.id).last_performed is None


def test_storage_failure_becomes_internal_error(monkeypatch, db, maintenance, manager, listing, notifier):
    definition = create(maintenance, manager, listing)

    def storage_down(current, recurrence):
        raise OperationalError("UPDATE scheduled_maintenance", {}, Exception("disk I/O error"))

    monkeypatch.setattr(scheduled_maintenance_service, "compute_next_due", storage_down)

    with pytest.raises(InternalError) as exc_info:
        maintenance.complete_occurrence(definition.id, manager, now=NOW)

    assert "disk" not in exc_info.value.detail
    assert task_count(db) == 0
    assert notifier.events == []


def test_tenant_cannot_complete(maintenance, manager, tenant, listing):
    definition = create(maintenance, manager, listing)

    with pytest.raises(ForbiddenError):
        maintenance.complete_occurrence(definition.id, tenant, now=NOW)


def test_complete_unknown_definition(maintenance, manager):
    with pytest.raises(NotFoundError):
        maintenance.complete_occurrence(uuid.uuid4(), manager, now=NOW)


def test_inactive_definition_cannot_be_completed(db, maintenance, manager, listing):
    definition = create(maintenance, manager, listing)
    maintenance.deactivate(definition.id, manager, now=NOW)

    with pytest.raises(InvalidStateError):
        maintenance.complete_occurrence(definition.id, manager, now=NOW)

    assert task_count(db) == 0


def test_deactivate_keeps_history(db, maintenance, manager, listing):
    definition = create(maintenance, manager, listing)
    maintenance.complete_occurrence(definition.id, manager, now=NOW)

    deactivated = maintenance.deactivate(definition.id, manager, now=NOW)

    assert deactivated.is_active is False
    assert task_count(db) == 1


# ==================== Update / Delete ====================

def test_update_definition_revalidates_recurrence(maintenance, manager, listing):
    definition = create(maintenance, manager, listing)

    updated = maintenance.update_definition(
        definition.id, manager, {"frequency": "yearly", "title": "Annual service"}, now=NOW
    )

    assert updated.frequency == MaintenanceFrequency.YEARLY
    assert updated.interval == 1
    assert updated.title == "Annual service"

    with pytest.raises(ValidationError):
        maintenance.update_definition(definition.id, manager, {"interval": 0}, now=NOW)
    with pytest.raises(ValidationError):
        maintenance.update_definition(definition.id, manager, {"created_by": uuid.uuid4()}, now=NOW)


def test_delete_cascades_to_history(db, maintenance, manager, listing):
    definition = create(maintenance, manager, listing)
    maintenance.complete_occurrence(definition.id, manager, now=NOW)
    maintenance.complete_occurrence(definition.id, manager, now=NOW)

    maintenance.delete_definition(definition.id, manager)

    assert db.get(ScheduledMaintenance, definition.id) is None
    assert task_count(db) == 0


def test_tenant_cannot_delete(maintenance, manager, tenant, listing):
    definition = create(maintenance, manager, listing)

    with pytest.raises(ForbiddenError):
        maintenance.delete_definition(definition.id, tenant)


# ==================== Derived status ====================

@pytest.mark.parametrize("next_due,expected", [
    (date(2024, 2, 29), DueStatus.OVERDUE),
    (date(2024, 3, 1), DueStatus.DUE_SOON),
    (date(2024, 3, 7), DueStatus.DUE_SOON),
    (date(2024, 3, 8), DueStatus.DUE_SOON),
    (date(2024, 3, 9), DueStatus.ON_TRACK),
])
def test_derive_due_status(next_due, expected):
    assert derive_due_status(next_due, TODAY, window_days=7) == expected


def test_list_definitions_ordered_and_annotated(maintenance, manager, listing):
    create(maintenance, manager, listing, next_due=date(2024, 4, 15), title="Gutters")
    create(maintenance, manager, listing, next_due=date(2024, 2, 1), title="Smoke alarms")
    create(maintenance, manager, listing, next_due=date(2024, 3, 4), title="Pest control")

    listed = maintenance.list_definitions(manager, now=NOW)

    assert [a.definition.title for a in listed] == ["Smoke alarms", "Pest control", "Gutters"]
    assert [a.status for a in listed] == [DueStatus.OVERDUE, DueStatus.DUE_SOON, DueStatus.ON_TRACK]

    overdue = maintenance.list_definitions(manager, status=DueStatus.OVERDUE, now=NOW)
    assert [a.definition.title for a in overdue] == ["Smoke alarms"]


def test_list_definitions_filters(maintenance, manager, listing):
    create(maintenance, manager, listing, category=MaintenanceCategory.PLUMBING)
    retired = create(maintenance, manager, listing, category=MaintenanceCategory.SAFETY)
    maintenance.deactivate(retired.id, manager, now=NOW)

    plumbing = maintenance.list_definitions(manager, category=MaintenanceCategory.PLUMBING, now=NOW)
    active = maintenance.list_definitions(manager, is_active=True, now=NOW)

    assert [a.definition.category for a in plumbing] == [MaintenanceCategory.PLUMBING]
    assert len(active) == 1


def test_tenants_see_only_occupied_properties(db, maintenance, manager, tenant, other_tenant, listing):
    elsewhere = make_property(db, manager, name="Hillside Villas")
    add_occupant(db, listing, tenant)
    mine = create(maintenance, manager, listing)
    theirs = create(maintenance, manager, elsewhere)

    assert [a.definition.id for a in maintenance.list_definitions(tenant, now=NOW)] == [mine.id]
    assert maintenance.list_definitions(other_tenant, now=NOW) == []
    assert maintenance.get_definition(mine.id, tenant, now=NOW).definition.id == mine.id
    with pytest.raises(ForbiddenError):
        maintenance.get_definition(theirs.id, tenant, now=NOW)


def test_get_definition_includes_history(maintenance, manager, listing):
    definition = create(maintenance, manager, listing)
    maintenance.complete_occurrence(definition.id, manager, now=NOW)
    maintenance.complete_occurrence(definition.id, manager, now=NOW)

    annotated = maintenance.get_definition(definition.id, manager, now=NOW)

    assert [t.due_date for t in annotated.definition.tasks] == [date(2024, 2, 29), date(2024, 1, 31)]
    assert annotated.status == DueStatus.ON_TRACK


def test_stats_by_category(maintenance, manager, listing):
    create(maintenance, manager, listing, category=MaintenanceCategory.HVAC)
    create(maintenance, manager, listing, category=MaintenanceCategory.HVAC)
    create(maintenance, manager, listing, category=MaintenanceCategory.CLEANING)

    stats = {row["category"]: row["count"] for row in maintenance.stats_by_category(manager)}

    assert stats == {MaintenanceCategory.HVAC: 2, MaintenanceCategory.CLEANING: 1}
