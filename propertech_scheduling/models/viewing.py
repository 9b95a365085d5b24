"""
Viewing Model - Property Viewing Management
"""
from datetime import date, datetime
import enum
import uuid

from sqlalchemy import (
    Date, DateTime, Enum as SQLEnum, ForeignKey, Index, String, Text, Uuid, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertech_scheduling.db.base import Base, TimestampMixin


class ViewingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Statuses that hold a slot
ACTIVE_VIEWING_STATUSES = (ViewingStatus.PENDING, ViewingStatus.CONFIRMED)


class ContactPreference(str, enum.Enum):
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"
    WHATSAPP = "whatsapp"


class FollowUpType(str, enum.Enum):
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    VIEWING = "viewing"
    OTHER = "other"


class FollowUpStatus(str, enum.Enum):
    SCHEDULED = "scheduled"


def _enum_column(enum_cls, name: str):
    # Persist enum values (not member names) so raw SQL predicates can match them
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


class Viewing(Base, TimestampMixin):
    """
    Viewing request for a property.

    ``slot_date``/``slot_time`` hold the slot the viewing currently occupies:
    the preferred slot while pending, the confirmed slot once confirmed. The
    partial unique index below guarantees one active viewing per slot.
    """
    __tablename__ = "viewings"
    __table_args__ = (
        Index(
            "uq_viewings_active_slot",
            "property_id",
            "slot_date",
            "slot_time",
            unique=True,
            postgresql_where=text("status IN ('pending', 'confirmed')"),
            sqlite_where=text("status IN ('pending', 'confirmed')"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    manager_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    preferred_date: Mapped[date] = mapped_column(Date, nullable=False)
    preferred_time: Mapped[str] = mapped_column(String(5), nullable=False)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False)
    slot_time: Mapped[str] = mapped_column(String(5), nullable=False)

    status: Mapped[ViewingStatus] = mapped_column(
        _enum_column(ViewingStatus, "viewing_status"),
        default=ViewingStatus.PENDING,
        nullable=False,
        index=True,
    )

    confirmed_date: Mapped[date] = mapped_column(Date, nullable=True)
    confirmed_time: Mapped[str] = mapped_column(String(5), nullable=True)

    notes: Mapped[str] = mapped_column(Text, nullable=True)
    manager_notes: Mapped[str] = mapped_column(Text, nullable=True)
    contact_preference: Mapped[ContactPreference] = mapped_column(
        _enum_column(ContactPreference, "contact_preference"), nullable=True
    )
    cancellation_reason: Mapped[str] = mapped_column(Text, nullable=True)

    confirmed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    property = relationship("Property", back_populates="viewings")
    follow_ups = relationship(
        "FollowUp", back_populates="viewing", cascade="all, delete-orphan"
    )

    def is_party(self, actor_id: uuid.UUID) -> bool:
        return actor_id in (self.tenant_id, self.manager_id)


class FollowUp(Base):
    """Post-viewing follow-up, scheduled by the host. Append-only."""
    __tablename__ = "follow_ups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    viewing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("viewings.id", ondelete="CASCADE"), nullable=False, index=True
    )

    follow_up_date: Mapped[date] = mapped_column(Date, nullable=False)
    follow_up_time: Mapped[str] = mapped_column(String(5), nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    type: Mapped[FollowUpType] = mapped_column(
        _enum_column(FollowUpType, "follow_up_type"), nullable=False
    )
    status: Mapped[FollowUpStatus] = mapped_column(
        _enum_column(FollowUpStatus, "follow_up_status"),
        default=FollowUpStatus.SCHEDULED,
        nullable=False,
    )
    scheduled_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    viewing = relationship("Viewing", back_populates="follow_ups")
