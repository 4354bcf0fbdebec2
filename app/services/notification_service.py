"""
Notification Service
Best-effort "tenant left" notifications for landlords.

Sinks never raise: a lost notification must not turn a committed
allocation change into an error. Each sink writes through its own
session, outside the allocation transaction.
"""
import json
import logging
import uuid
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

from fastapi import BackgroundTasks
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantLeftEvent:
    student_id: uuid.UUID
    student_name: str
    property_id: uuid.UUID
    property_location: str
    room_number: int
    landlord_id: uuid.UUID

    def to_metadata(self) -> dict:
        return {
            "studentId": str(self.student_id),
            "studentName": self.student_name,
            "propertyId": str(self.property_id),
            "propertyLocation": self.property_location,
            "roomNumber": self.room_number,
            "landlordId": str(self.landlord_id),
        }


class NotificationSink:
    """Interface: emit_tenant_left(event) -> None, never raises."""

    def emit_tenant_left(self, event: TenantLeftEvent) -> None:
        raise NotImplementedError


class DatabaseNotificationSink(NotificationSink):
    """Persists notifications with a fresh session per attempt."""

    def __init__(self, session_factory: Callable[[], Session], max_retries: int = 3):
        self.session_factory = session_factory
        self.max_retries = max(1, max_retries)

    def emit_tenant_left(self, event: TenantLeftEvent) -> None:
        for attempt in range(1, self.max_retries + 1):
            db = self.session_factory()
            try:
                db.add(Notification(
                    type=NotificationType.TENANT_LEFT,
                    title="Student Left Room",
                    message=(
                        f"{event.student_name or 'A student'} has left room "
                        f"{event.room_number} at {event.property_location}"
                    ),
                    read=False,
                    recipient_id=event.landlord_id,
                    payload=json.dumps(event.to_metadata()),
                ))
                db.commit()
                logger.info(
                    f"[NOTIFY] TENANT_LEFT sent to landlord {event.landlord_id} "
                    f"(property {event.property_id}, room {event.room_number})"
                )
                return
            except Exception as exc:
                db.rollback()
                logger.warning(
                    f"[NOTIFY] Attempt {attempt}/{self.max_retries} failed for "
                    f"landlord {event.landlord_id}: {exc}"
                )
            finally:
                db.close()

        logger.error(f"[NOTIFY] Giving up on TENANT_LEFT notification: {asdict(event)}")


class BackgroundNotificationSink(NotificationSink):
    """Defers emission until after the HTTP response is sent."""

    def __init__(self, background_tasks: BackgroundTasks, inner: NotificationSink):
        self.background_tasks = background_tasks
        self.inner = inner

    def emit_tenant_left(self, event: TenantLeftEvent) -> None:
        self.background_tasks.add_task(self.inner.emit_tenant_left, event)


class InMemoryNotificationSink(NotificationSink):
    """Collects events in a list."""

    def __init__(self, fail: bool = False):
        self.events: List[TenantLeftEvent] = []
        self.fail = fail

    def emit_tenant_left(self, event: TenantLeftEvent) -> None:
        if self.fail:
            raise RuntimeError("notification transport unavailable")
        self.events.append(event)


# ──────────────────────────── Queries ────────────────────────────

def list_notifications(
    db: Session,
    recipient_id: Optional[uuid.UUID] = None,
    type_: Optional[NotificationType] = None,
    unread: bool = False,
    property_id: Optional[uuid.UUID] = None,
    limit: int = 100,
) -> List[Notification]:
    """Newest first. recipient_id=None lists every recipient (admin view)."""
    stmt = select(Notification)
    if recipient_id is not None:
        stmt = stmt.where(Notification.recipient_id == recipient_id)
    if type_ is not None:
        stmt = stmt.where(Notification.type == type_)
    if unread:
        stmt = stmt.where(Notification.read.is_(False))
    if property_id is not None:
        stmt = stmt.where(Notification.payload.contains(str(property_id)))
    stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


def mark_read(
    db: Session,
    notification_ids: List[uuid.UUID],
    recipient_id: Optional[uuid.UUID] = None,
) -> int:
    """Mark the given notifications read; only the recipient's own unless recipient_id is None."""
    stmt = update(Notification).where(Notification.id.in_(notification_ids))
    if recipient_id is not None:
        stmt = stmt.where(Notification.recipient_id == recipient_id)
    result = db.execute(stmt.values(read=True).execution_options(synchronize_session=False))
    db.commit()
    return result.rowcount


def mark_all_read(db: Session, recipient_id: uuid.UUID) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == recipient_id, Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount
