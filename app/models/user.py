"""
User Model
Students, landlords and admins share one table; students carry the
gender/religion attributes used for room compatibility.
"""
from enum import Enum
from typing import Optional
from sqlalchemy import String, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, TimestampMixin


class UserType(str, Enum):
    STUDENT = "STUDENT"
    LANDLORD = "LANDLORD"
    ADMIN = "ADMIN"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    ANY = "ANY"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType), default=UserType.STUDENT, nullable=False, index=True
    )

    # Student profile - compatibility attributes
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    religion: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Relationships
    properties = relationship("Property", back_populates="owner")
    occupancies = relationship("Occupant", back_populates="user")
    notifications = relationship("Notification", back_populates="recipient")

    @property
    def is_landlord(self) -> bool:
        return self.user_type == UserType.LANDLORD

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN
