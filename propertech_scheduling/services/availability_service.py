"""Viewing slot availability."""

import logging
import uuid
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from propertech_scheduling.core.config import settings
from propertech_scheduling.core.exceptions import NotFoundError
from propertech_scheduling.models.viewing import Viewing, ACTIVE_VIEWING_STATUSES
from propertech_scheduling.services.resource_directory import ResourceDirectory

logger = logging.getLogger(__name__)

# Monday=0 ... Friday=4
BUSINESS_DAYS = range(0, 5)


def generate_slots(day: date) -> List[str]:
    """
    Slot labels for ``day``: every SLOT_MINUTES from SLOT_DAY_START through
    SLOT_DAY_END inclusive on weekdays, nothing at weekends.
    """
    if day.weekday() not in BUSINESS_DAYS:
        return []

    current = datetime.combine(day, time.fromisoformat(settings.SLOT_DAY_START))
    last = datetime.combine(day, time.fromisoformat(settings.SLOT_DAY_END))
    step = timedelta(minutes=settings.SLOT_MINUTES)

    slots = []
    while current <= last:
        slots.append(current.strftime("%H:%M"))
        current += step
    return slots


def is_bookable(day: date, slot: str) -> bool:
    return slot in generate_slots(day)


class AvailabilityService:
    """Free/booked slot lookup for a property on a given day. Read-only."""

    def __init__(self, db: Session, resources: Optional[ResourceDirectory] = None):
        self.db = db
        self.resources = resources or ResourceDirectory(db)

    def booked_slots(self, property_id: uuid.UUID, day: date) -> Set[str]:
        rows = self.db.execute(
            select(Viewing.slot_time).where(
                Viewing.property_id == property_id,
                Viewing.slot_date == day,
                Viewing.status.in_(ACTIVE_VIEWING_STATUSES),
            )
        ).scalars()
        return set(rows)

    def available_slots(self, property_id: uuid.UUID, day: date) -> List[str]:
        booked = self.booked_slots(property_id, day)
        return [slot for slot in generate_slots(day) if slot not in booked]

    def summary(self, property_id: uuid.UUID, day: date) -> dict:
        """Available and booked slots in one read, both in slot order."""
        if not self.resources.get(property_id).exists:
            raise NotFoundError("Property not found")
        booked = self.booked_slots(property_id, day)
        logger.debug(f"[SLOTS] property={property_id} date={day} booked={len(booked)}")
        return {
            "date": day,
            "availableSlots": [s for s in generate_slots(day) if s not in booked],
            "bookedSlots": sorted(booked),
        }
