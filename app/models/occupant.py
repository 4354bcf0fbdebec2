"""
Occupant Model - one student's claim on a room-slot within a property.
Records are never deleted; releasing a room flips status to INACTIVE.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, Float, DateTime, ForeignKey, Enum as SQLEnum, Uuid, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, TimestampMixin, utcnow


class OccupantStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Occupant(Base, TimestampMixin):
    __tablename__ = "occupants"
    __table_args__ = (
        Index("ix_occupants_property_status_room", "property_id", "status", "room_number"),
        # At most one ACTIVE occupancy per (property, user)
        Index(
            "uq_occupants_active_property_user",
            "property_id",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_rooms: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    status: Mapped[OccupantStatus] = mapped_column(
        SQLEnum(OccupantStatus), default=OccupantStatus.ACTIVE, nullable=False, index=True
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    total_price: Mapped[float] = mapped_column(Float, nullable=False)

    # Relationships
    property = relationship("Property", back_populates="occupants", lazy="joined")
    user = relationship("User", back_populates="occupancies", lazy="joined")
