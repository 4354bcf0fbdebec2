from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List

from app.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    type: NotificationType
    title: str
    message: str
    read: bool
    recipient_id: UUID
    data: dict = {}
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]


class MarkReadRequest(BaseModel):
    notification_ids: List[UUID] = Field(..., min_length=1)


class MarkReadResponse(BaseModel):
    message: str
    count: int
