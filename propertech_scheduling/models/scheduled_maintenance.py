"""
Scheduled Maintenance Models
Recurring maintenance definitions and their append-only completion history.
"""
from datetime import date, datetime
from enum import Enum
import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Date, DateTime, Enum as SQLEnum, Float, ForeignKey,
    Integer, String, Text, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertech_scheduling.db.base import Base, TimestampMixin


class MaintenanceFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MaintenanceCategory(str, Enum):
    HVAC = "hvac"
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    PEST_CONTROL = "pest_control"
    CLEANING = "cleaning"
    LANDSCAPING = "landscaping"
    SAFETY = "safety"
    OTHER = "other"


class MaintenanceTaskStatus(str, Enum):
    COMPLETED = "completed"


def _enum_column(enum_cls, name: str):
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


class ScheduledMaintenance(Base, TimestampMixin):
    __tablename__ = "scheduled_maintenance"
    __table_args__ = (
        CheckConstraint("\"interval\" > 0", name="ck_scheduled_maintenance_interval"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=True)

    frequency: Mapped[MaintenanceFrequency] = mapped_column(
        _enum_column(MaintenanceFrequency, "maintenance_frequency"), nullable=False
    )
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    next_due: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    last_performed: Mapped[date] = mapped_column(Date, nullable=True)

    estimated_cost: Mapped[float] = mapped_column(Float, nullable=True)
    priority: Mapped[MaintenancePriority] = mapped_column(
        _enum_column(MaintenancePriority, "maintenance_priority"),
        default=MaintenancePriority.MEDIUM,
        nullable=False,
    )
    category: Mapped[MaintenanceCategory] = mapped_column(
        _enum_column(MaintenanceCategory, "maintenance_category"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    assigned_to: Mapped[str] = mapped_column(String(255), nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Relationships
    property = relationship("Property", back_populates="scheduled_maintenance")
    tasks = relationship(
        "ScheduledMaintenanceTask",
        back_populates="scheduled_maintenance",
        cascade="all, delete-orphan",
        order_by="desc(ScheduledMaintenanceTask.due_date)",
    )


class ScheduledMaintenanceTask(Base):
    """One completed occurrence. Never mutated after creation."""
    __tablename__ = "scheduled_maintenance_tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    scheduled_maintenance_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("scheduled_maintenance.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    completed_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[MaintenanceTaskStatus] = mapped_column(
        _enum_column(MaintenanceTaskStatus, "maintenance_task_status"),
        default=MaintenanceTaskStatus.COMPLETED,
        nullable=False,
    )
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    cost: Mapped[float] = mapped_column(Float, nullable=True)
    performed_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    scheduled_maintenance = relationship("ScheduledMaintenance", back_populates="tasks")
