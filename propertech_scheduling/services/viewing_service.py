"""
Viewing Scheduler

State machine for property viewings:

    pending ──confirm (host)──> confirmed
       │                           │
       └──cancel (either party)────┴──> cancelled (terminal)

A pending or confirmed viewing holds one slot (property, date, time). The
database's partial unique index is what actually prevents two active viewings
on the same slot; the read-side checks here only produce a friendlier error
in the common, uncontended case.

Every status write is a guarded UPDATE that repeats the expected status in its
WHERE clause, so a transition computed from a stale read affects zero rows
and is reported as InvalidState instead of overwriting a concurrent change.
"""
import logging
import math
import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from propertech_scheduling.core.deps import Actor, ActorRole
from propertech_scheduling.core.exceptions import (
    ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError,
)
from propertech_scheduling.db.base import utcnow
from propertech_scheduling.models.viewing import (
    ACTIVE_VIEWING_STATUSES, ContactPreference, Viewing, ViewingStatus,
)
from propertech_scheduling.services.availability_service import is_bookable
from propertech_scheduling.services.notification_service import (
    NotificationEvent, NotificationSink, default_notification_sink,
)
from propertech_scheduling.services.resource_directory import ResourceDirectory
from propertech_scheduling.services.transactions import atomic

logger = logging.getLogger(__name__)

SLOT_TAKEN = "This time slot is already booked"

UPDATABLE_FIELDS = {"preferred_date", "preferred_time", "notes", "contact_preference"}


def viewing_payload(viewing: Viewing) -> Dict[str, Any]:
    return {
        "viewing_id": str(viewing.id),
        "property_id": str(viewing.property_id),
        "status": viewing.status.value,
        "date": viewing.slot_date.isoformat(),
        "time": viewing.slot_time,
    }


class ViewingScheduler:
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

    def request_viewing(
        self,
        property_id: uuid.UUID,
        requester: Actor,
        preferred_date: date,
        preferred_time: str,
        notes: Optional[str] = None,
        contact_preference: Optional[ContactPreference] = None,
        now: Optional[datetime] = None,
    ) -> Viewing:
        now = now or utcnow()

        with atomic(self.db, conflict_detail=SLOT_TAKEN):
            resource = self.resources.get(property_id)
            if not resource.exists:
                raise NotFoundError("Property not found")
            if not resource.is_open_for_viewing:
                raise InvalidStateError("Property is not available for viewing")

            self._check_slot(property_id, preferred_date, preferred_time)

            viewing = Viewing(
                property_id=property_id,
                tenant_id=requester.id,
                manager_id=resource.owner_id,
                preferred_date=preferred_date,
                preferred_time=preferred_time,
                slot_date=preferred_date,
                slot_time=preferred_time,
                status=ViewingStatus.PENDING,
                notes=notes,
                contact_preference=contact_preference,
                created_at=now,
                updated_at=now,
            )
            self.db.add(viewing)
            self.db.flush()

        logger.info(
            f"[VIEWING] {viewing.id} requested for property {property_id} "
            f"on {preferred_date} {preferred_time} by {requester.id}"
        )
        self.notifier.notify(
            viewing.manager_id, NotificationEvent.VIEWING_REQUESTED, viewing_payload(viewing)
        )
        return viewing

    def update_viewing(
        self,
        viewing_id: uuid.UUID,
        actor: Actor,
        fields: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Viewing:
        now = now or utcnow()
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        with atomic(self.db, conflict_detail=SLOT_TAKEN):
            viewing = self._load_for_write(viewing_id)
            self._require_party(viewing, actor)
            if viewing.status != ViewingStatus.PENDING:
                raise InvalidStateError("Cannot update confirmed or cancelled viewing")

            values = {k: v for k, v in fields.items() if v is not None}
            new_date = values.get("preferred_date", viewing.preferred_date)
            new_time = values.get("preferred_time", viewing.preferred_time)
            if (new_date, new_time) != (viewing.slot_date, viewing.slot_time):
                self._check_slot(viewing.property_id, new_date, new_time, exclude_id=viewing.id)
                values["slot_date"] = new_date
                values["slot_time"] = new_time

            values["updated_at"] = now
            self._guarded_update(viewing, (ViewingStatus.PENDING,), values)

        logger.info(f"[VIEWING] {viewing.id} updated by {actor.id}: {sorted(fields)}")
        self.notifier.notify(
            self._other_party(viewing, actor),
            NotificationEvent.VIEWING_UPDATED,
            viewing_payload(viewing),
        )
        return viewing

    def cancel_viewing(
        self,
        viewing_id: uuid.UUID,
        actor: Actor,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Viewing:
        """
        Cancel a pending or confirmed viewing and free its slot.

        Cancelling an already-cancelled viewing is an InvalidState error, not
        a no-op: the first cancellation's reason and timestamp are kept.
        """
        now = now or utcnow()

        with atomic(self.db):
            viewing = self._load_for_write(viewing_id)
            self._require_party(viewing, actor)
            if viewing.status == ViewingStatus.CANCELLED:
                raise InvalidStateError("Viewing is already cancelled")

            self._guarded_update(
                viewing,
                ACTIVE_VIEWING_STATUSES,
                {
                    "status": ViewingStatus.CANCELLED,
                    "cancellation_reason": reason,
                    "cancelled_at": now,
                    "updated_at": now,
                },
            )

        logger.info(f"[VIEWING] {viewing.id} cancelled by {actor.id}")
        self.notifier.notify(
            self._other_party(viewing, actor),
            NotificationEvent.VIEWING_CANCELLED,
            {**viewing_payload(viewing), "reason": reason},
        )
        return viewing

    def confirm_viewing(
        self,
        viewing_id: uuid.UUID,
        host: Actor,
        confirmed_date: Optional[date] = None,
        confirmed_time: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Viewing:
        """Confirm a pending viewing. Date and time default to the requester's preference."""
        now = now or utcnow()

        with atomic(self.db, conflict_detail=SLOT_TAKEN):
            viewing = self._load_for_write(viewing_id)
            if viewing.manager_id != host.id:
                raise ForbiddenError("Only the host can confirm this viewing")
            if viewing.status != ViewingStatus.PENDING:
                raise InvalidStateError("Can only confirm pending viewings")

            day = confirmed_date or viewing.preferred_date
            slot = confirmed_time or viewing.preferred_time
            values = {
                "status": ViewingStatus.CONFIRMED,
                "confirmed_date": day,
                "confirmed_time": slot,
                "manager_notes": notes,
                "confirmed_at": now,
                "updated_at": now,
            }
            if (day, slot) != (viewing.slot_date, viewing.slot_time):
                self._check_slot(viewing.property_id, day, slot, exclude_id=viewing.id)
                values["slot_date"] = day
                values["slot_time"] = slot

            self._guarded_update(viewing, (ViewingStatus.PENDING,), values)

        logger.info(f"[VIEWING] {viewing.id} confirmed for {day} {slot}")
        self.notifier.notify(
            viewing.tenant_id, NotificationEvent.VIEWING_CONFIRMED, viewing_payload(viewing)
        )
        return viewing

    # ──────────────────────────── Queries ────────────────────────────

    def get_viewing(self, viewing_id: uuid.UUID, actor: Actor) -> Viewing:
        viewing = self.db.get(Viewing, viewing_id)
        if viewing is None:
            raise NotFoundError("Viewing not found")
        self._require_party(viewing, actor)
        return viewing

    def list_viewings(
        self,
        actor: Actor,
        status: Optional[ViewingStatus] = None,
        property_id: Optional[uuid.UUID] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> Tuple[List[Viewing], Dict[str, int]]:
        """Viewings the actor takes part in, newest first, with pagination metadata."""
        conditions = []
        if actor.role == ActorRole.TENANT:
            conditions.append(Viewing.tenant_id == actor.id)
        else:
            conditions.append(Viewing.manager_id == actor.id)
        if status is not None:
            conditions.append(Viewing.status == status)
        if property_id is not None:
            conditions.append(Viewing.property_id == property_id)

        total = self.db.execute(
            select(func.count()).select_from(Viewing).where(*conditions)
        ).scalar_one()
        viewings = list(
            self.db.execute(
                select(Viewing)
                .where(*conditions)
                .order_by(Viewing.created_at.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            ).scalars()
        )
        pagination = {
            "page": page,
            "limit": page_size,
            "total": total,
            "pages": math.ceil(total / page_size) if page_size else 0,
        }
        return viewings, pagination

    # ──────────────────────────── Helpers ────────────────────────────

    def _load_for_write(self, viewing_id: uuid.UUID) -> Viewing:
        viewing = self.db.execute(
            select(Viewing)
            .where(Viewing.id == viewing_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if viewing is None:
            raise NotFoundError("Viewing not found")
        return viewing

    @staticmethod
    def _require_party(viewing: Viewing, actor: Actor) -> None:
        if not viewing.is_party(actor.id):
            raise ForbiddenError("Access denied")

    @staticmethod
    def _other_party(viewing: Viewing, actor: Actor) -> uuid.UUID:
        return viewing.manager_id if actor.id == viewing.tenant_id else viewing.tenant_id

    def _check_slot(
        self,
        property_id: uuid.UUID,
        day: date,
        slot: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        if not is_bookable(day, slot):
            raise ValidationError(f"{slot} on {day.isoformat()} is not a bookable slot")

        query = select(Viewing.id).where(
            Viewing.property_id == property_id,
            Viewing.slot_date == day,
            Viewing.slot_time == slot,
            Viewing.status.in_(ACTIVE_VIEWING_STATUSES),
        )
        if exclude_id is not None:
            query = query.where(Viewing.id != exclude_id)
        if self.db.execute(query.limit(1)).first() is not None:
            raise ConflictError(SLOT_TAKEN)

    def _guarded_update(
        self,
        viewing: Viewing,
        expected: Iterable[ViewingStatus],
        values: Dict[str, Any],
    ) -> None:
        result = self.db.execute(
            update(Viewing)
            .where(Viewing.id == viewing.id, Viewing.status.in_(tuple(expected)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateError("Viewing was changed by another request; reload and retry")
