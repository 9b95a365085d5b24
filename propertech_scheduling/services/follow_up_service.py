"""
Follow-up scheduling for viewings.

Follow-ups live on their own calendar: they are not checked against other
follow-ups or against viewing slots.
"""
import logging
import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from propertech_scheduling.core.deps import Actor
from propertech_scheduling.core.exceptions import ForbiddenError, NotFoundError
from propertech_scheduling.db.base import utcnow
from propertech_scheduling.models.viewing import (
    FollowUp, FollowUpStatus, FollowUpType, Viewing,
)
from propertech_scheduling.services.notification_service import (
    NotificationEvent, NotificationSink, default_notification_sink,
)
from propertech_scheduling.services.transactions import atomic

logger = logging.getLogger(__name__)


class FollowUpScheduler:
    def __init__(self, db: Session, notifier: Optional[NotificationSink] = None):
        self.db = db
        self.notifier = notifier or default_notification_sink()

    def schedule_follow_up(
        self,
        viewing_id: uuid.UUID,
        host: Actor,
        follow_up_date: date,
        follow_up_time: Optional[str],
        notes: Optional[str],
        type: FollowUpType,
        now: Optional[datetime] = None,
    ) -> FollowUp:
        now = now or utcnow()

        with atomic(self.db):
            viewing = self.db.get(Viewing, viewing_id)
            if viewing is None:
                raise NotFoundError("Viewing not found")
            if viewing.manager_id != host.id:
                raise ForbiddenError("Access denied")

            follow_up = FollowUp(
                viewing_id=viewing.id,
                follow_up_date=follow_up_date,
                follow_up_time=follow_up_time,
                notes=notes,
                type=type,
                status=FollowUpStatus.SCHEDULED,
                scheduled_by=host.id,
                created_at=now,
            )
            self.db.add(follow_up)
            self.db.flush()

        logger.info(f"[FOLLOW-UP] {follow_up.id} scheduled for viewing {viewing_id} on {follow_up_date}")
        self.notifier.notify(
            viewing.tenant_id,
            NotificationEvent.FOLLOW_UP_SCHEDULED,
            {
                "follow_up_id": str(follow_up.id),
                "viewing_id": str(viewing_id),
                "date": follow_up_date.isoformat(),
                "time": follow_up_time,
                "type": follow_up.type.value,
            },
        )
        return follow_up

    def list_follow_ups(self, viewing_id: uuid.UUID, actor: Actor) -> List[FollowUp]:
        viewing = self.db.get(Viewing, viewing_id)
        if viewing is None:
            raise NotFoundError("Viewing not found")
        if not viewing.is_party(actor.id):
            raise ForbiddenError("Access denied")
        return list(
            self.db.execute(
                select(FollowUp)
                .where(FollowUp.viewing_id == viewing_id)
                .order_by(FollowUp.follow_up_date, FollowUp.follow_up_time)
            ).scalars()
        )
