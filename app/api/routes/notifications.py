from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.core.deps import require_user_type
from app.database import get_db
from app.models.notification import NotificationType
from app.models.user import User, UserType
from app.schemas.notification import NotificationListResponse, MarkReadRequest, MarkReadResponse
from app.services import notification_service

router = APIRouter()


def _recipient_scope(user: User) -> Optional[UUID]:
    # Admins see every notification; landlords only their own
    return None if user.is_admin else user.id


@router.get("/", response_model=NotificationListResponse)
def list_notifications(
    type: Optional[NotificationType] = None,
    unread: bool = False,
    property_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.LANDLORD, UserType.ADMIN))
):
    """Notifications, newest first"""
    notifications = notification_service.list_notifications(
        db,
        recipient_id=_recipient_scope(current_user),
        type_=type,
        unread=unread,
        property_id=property_id,
    )
    return {"notifications": notifications}


@router.post("/mark-read", response_model=MarkReadResponse)
def mark_read(
    request: MarkReadRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.LANDLORD, UserType.ADMIN))
):
    count = notification_service.mark_read(db, request.notification_ids, _recipient_scope(current_user))
    return {"message": "Notifications marked as read", "count": count}


@router.post("/mark-all-read", response_model=MarkReadResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.LANDLORD, UserType.ADMIN))
):
    count = notification_service.mark_all_read(db, current_user.id)
    return {"message": "All notifications marked as read", "count": count}
