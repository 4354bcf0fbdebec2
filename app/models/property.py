from enum import Enum
from typing import Optional
from sqlalchemy import String, ForeignKey, Integer, Float, Text, Boolean, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, TimestampMixin


class PropertyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    MAINTENANCE = "MAINTENANCE"


ANY_PREFERENCE = "ANY"


class Property(Base, TimestampMixin):
    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)  # per room

    # Capacity descriptors
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    room_sharing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tenants_per_room: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # Mirrors the count of ACTIVE occupants; only the allocation engine writes it
    current_occupants: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus), default=PropertyStatus.AVAILABLE, nullable=False, index=True
    )

    # Compatibility preferences
    gender: Mapped[str] = mapped_column(String(20), default=ANY_PREFERENCE, nullable=False)
    religion: Mapped[str] = mapped_column(String(50), default=ANY_PREFERENCE, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="properties")
    occupants = relationship("Occupant", back_populates="property")

    @property
    def effective_tenants_per_room(self) -> int:
        return self.tenants_per_room if self.room_sharing else 1

    @property
    def max_occupants(self) -> int:
        return self.bedrooms * self.effective_tenants_per_room
