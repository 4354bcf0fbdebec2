from enum import Enum
from typing import Optional
from sqlalchemy import String, Text, Boolean, ForeignKey, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import json
import uuid

from app.db.base import Base, TimestampMixin


class NotificationType(str, Enum):
    TENANT_LEFT = "TENANT_LEFT"


class Notification(Base, TimestampMixin):
    """In-app notification addressed to a landlord"""
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type: Mapped[NotificationType] = mapped_column(SQLEnum(NotificationType), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    recipient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    # "metadata" is reserved on declarative classes
    payload: Mapped[Optional[str]] = mapped_column("metadata", Text, nullable=True)  # JSON string

    recipient = relationship("User", back_populates="notifications")

    @property
    def data(self) -> dict:
        return json.loads(self.payload) if self.payload else {}
