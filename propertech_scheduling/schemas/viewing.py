"""
Viewing Schemas - request/response validation for viewing bookings,
slot availability and follow-ups.
"""
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from propertech_scheduling.models.viewing import (
    ContactPreference, FollowUpStatus, FollowUpType, ViewingStatus,
)

SLOT_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ============================================
# REQUEST SCHEMAS
# ============================================

class ViewingCreate(BaseModel):
    property_id: UUID
    preferred_date: date
    preferred_time: str = Field(..., pattern=SLOT_PATTERN, examples=["14:30"])
    notes: Optional[str] = None
    contact_preference: Optional[ContactPreference] = None


class ViewingUpdate(BaseModel):
    preferred_date: Optional[date] = None
    preferred_time: Optional[str] = Field(None, pattern=SLOT_PATTERN)
    notes: Optional[str] = None
    contact_preference: Optional[ContactPreference] = None


class ViewingCancel(BaseModel):
    reason: Optional[str] = None


class ViewingConfirm(BaseModel):
    confirmed_date: Optional[date] = None
    confirmed_time: Optional[str] = Field(None, pattern=SLOT_PATTERN)
    notes: Optional[str] = None


class FollowUpCreate(BaseModel):
    viewing_id: UUID
    follow_up_date: date
    follow_up_time: Optional[str] = Field(None, pattern=SLOT_PATTERN)
    notes: Optional[str] = None
    type: FollowUpType


# ============================================
# RESPONSE SCHEMAS
# ============================================

class ViewingResponse(BaseModel):
    id: UUID
    property_id: UUID
    tenant_id: UUID
    manager_id: UUID
    preferred_date: date
    preferred_time: str
    status: ViewingStatus
    confirmed_date: Optional[date] = None
    confirmed_time: Optional[str] = None
    notes: Optional[str] = None
    manager_notes: Optional[str] = None
    contact_preference: Optional[ContactPreference] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ViewingListResponse(BaseModel):
    viewings: List[ViewingResponse]
    pagination: Dict[str, int]


class AvailableSlotsResponse(BaseModel):
    date: date
    availableSlots: List[str]
    bookedSlots: List[str]


class FollowUpResponse(BaseModel):
    id: UUID
    viewing_id: UUID
    follow_up_date: date
    follow_up_time: Optional[str] = None
    notes: Optional[str] = None
    type: FollowUpType
    status: FollowUpStatus
    scheduled_by: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
