"""
Booking Routes - viewing requests, slot availability and follow-ups

Endpoints:
  GET    /api/bookings/viewings                    → list the caller's viewings
  GET    /api/bookings/viewings/{id}               → get one viewing
  POST   /api/bookings/viewings                    → request a viewing (tenant)
  PUT    /api/bookings/viewings/{id}               → update a pending viewing
  DELETE /api/bookings/viewings/{id}               → cancel a viewing
  PATCH  /api/bookings/viewings/{id}/confirm       → confirm a viewing (host)
  GET    /api/bookings/viewings/{id}/follow-ups    → follow-ups for a viewing
  GET    /api/bookings/slots/{property_id}         → available/booked slots for a date
  POST   /api/bookings/follow-up                   → schedule a follow-up (host)
"""
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from propertech_scheduling.core.config import settings
from propertech_scheduling.core.deps import Actor, ActorRole, get_current_actor, require_role
from propertech_scheduling.database import get_db
from propertech_scheduling.db.base import utcnow
from propertech_scheduling.models.viewing import ViewingStatus
from propertech_scheduling.schemas.viewing import (
    AvailableSlotsResponse, FollowUpCreate, FollowUpResponse, ViewingCancel,
    ViewingConfirm, ViewingCreate, ViewingListResponse, ViewingResponse, ViewingUpdate,
)
from propertech_scheduling.services.availability_service import AvailabilityService
from propertech_scheduling.services.follow_up_service import FollowUpScheduler
from propertech_scheduling.services.notification_service import (
    NotificationSink, get_notification_sink,
)
from propertech_scheduling.services.viewing_service import ViewingScheduler

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Bookings"])


def get_viewing_scheduler(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink),
) -> ViewingScheduler:
    return ViewingScheduler(db, notifier=notifier)


def get_follow_up_scheduler(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink),
) -> FollowUpScheduler:
    return FollowUpScheduler(db, notifier=notifier)


# ═══════════════════════ VIEWINGS ═══════════════════════

@router.get("/viewings", response_model=ViewingListResponse)
def list_viewings(
    status_filter: Optional[ViewingStatus] = Query(None, alias="status"),
    property_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    scheduler: ViewingScheduler = Depends(get_viewing_scheduler),
    actor: Actor = Depends(get_current_actor),
):
    """Viewings the caller requested (tenant) or hosts (manager), newest first."""
    viewings, pagination = scheduler.list_viewings(
        actor,
        status=status_filter,
        property_id=property_id,
        page=page,
        page_size=limit,
    )
    return {
        "viewings": [ViewingResponse.model_validate(v) for v in viewings],
        "pagination": pagination,
    }


@router.get("/viewings/{viewing_id}", response_model=ViewingResponse)
def get_viewing(
    viewing_id: UUID,
    scheduler: ViewingScheduler = Depends(get_viewing_scheduler),
    actor: Actor = Depends(get_current_actor),
):
    return scheduler.get_viewing(viewing_id, actor)


@router.post("/viewings", response_model=ViewingResponse, status_code=status.HTTP_201_CREATED)
def create_viewing(
    request: ViewingCreate,
    scheduler: ViewingScheduler = Depends(get_viewing_scheduler),
    actor: Actor = Depends(require_role(ActorRole.TENANT)),
):
    """Request a viewing slot. Fails with 409 if the slot is already held."""
    return scheduler.request_viewing(
        request.property_id,
        actor,
        request.preferred_date,
        request.preferred_time,
        notes=request.notes,
        contact_preference=request.contact_preference,
        now=utcnow(),
    )


@router.put("/viewings/{viewing_id}", response_model=ViewingResponse)
def update_viewing(
    viewing_id: UUID,
    request: ViewingUpdate,
    scheduler: ViewingScheduler = Depends(get_viewing_scheduler),
    actor: Actor = Depends(get_current_actor),
):
    """Update a pending viewing. Confirmed or cancelled viewings cannot change."""
    return scheduler.update_viewing(
        viewing_id,
        actor,
        request.model_dump(exclude_unset=True),
        now=utcnow(),
    )


@router.delete("/viewings/{viewing_id}", response_model=ViewingResponse)
def cancel_viewing(
    viewing_id: UUID,
    request: Optional[ViewingCancel] = Body(None),
    scheduler: ViewingScheduler = Depends(get_viewing_scheduler),
    actor: Actor = Depends(get_current_actor),
):
    reason = request.reason if request else None
    return scheduler.cancel_viewing(viewing_id, actor, reason=reason, now=utcnow())


@router.patch("/viewings/{viewing_id}/confirm", response_model=ViewingResponse)
def confirm_viewing(
    viewing_id: UUID,
    request: Optional[ViewingConfirm] = Body(None),
    scheduler: ViewingScheduler = Depends(get_viewing_scheduler),
    actor: Actor = Depends(require_role(ActorRole.MANAGER)),
):
    request = request or ViewingConfirm()
    return scheduler.confirm_viewing(
        viewing_id,
        actor,
        confirmed_date=request.confirmed_date,
        confirmed_time=request.confirmed_time,
        notes=request.notes,
        now=utcnow(),
    )


# ═══════════════════════ SLOTS ═══════════════════════

@router.get("/slots/{property_id}", response_model=AvailableSlotsResponse)
def get_available_slots(
    property_id: UUID,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Open and booked 30-minute slots for a property on one day."""
    return AvailabilityService(db).summary(property_id, day)


# ═══════════════════════ FOLLOW-UPS ═══════════════════════

@router.post("/follow-up", response_model=FollowUpResponse, status_code=status.HTTP_201_CREATED)
def schedule_follow_up(
    request: FollowUpCreate,
    scheduler: FollowUpScheduler = Depends(get_follow_up_scheduler),
    actor: Actor = Depends(require_role(ActorRole.MANAGER)),
):
    return scheduler.schedule_follow_up(
        request.viewing_id,
        actor,
        request.follow_up_date,
        request.follow_up_time,
        request.notes,
        request.type,
        now=utcnow(),
    )


@router.get("/viewings/{viewing_id}/follow-ups", response_model=list[FollowUpResponse])
def list_follow_ups(
    viewing_id: UUID,
    scheduler: FollowUpScheduler = Depends(get_follow_up_scheduler),
    actor: Actor = Depends(get_current_actor),
):
    return scheduler.list_follow_ups(viewing_id, actor)
