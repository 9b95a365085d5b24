"""
Property Model - read-only view of the listings directory

Listing CRUD lives in the listings service; the scheduling core only needs to
know whether a property exists, who hosts it, whether it is open for viewings
and which tenants occupy it.
"""
import uuid

from sqlalchemy import Boolean, Column, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertech_scheduling.db.base import Base, TimestampMixin


property_occupants = Table(
    "property_occupants",
    Base.metadata,
    Column("property_id", Uuid, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column("tenant_id", Uuid, primary_key=True, index=True),
)


class Property(Base, TimestampMixin):
    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Manager/owner who hosts viewings for this property
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=True)
    is_available_for_viewing: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    viewings = relationship("Viewing", back_populates="property")
    scheduled_maintenance = relationship("ScheduledMaintenance", back_populates="property")
