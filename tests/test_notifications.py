import uuid

import pytest

from app.models.notification import Notification, NotificationType
from app.models.user import UserType
from app.services.notification_service import (
    DatabaseNotificationSink, TenantLeftEvent, list_notifications,
)


def tenant_left(landlord_id, property_id=None, room_number=1):
    return TenantLeftEvent(
        student_id=uuid.uuid4(),
        student_name="Remi",
        property_id=property_id or uuid.uuid4(),
        property_location="4 Quad Lane",
        room_number=room_number,
        landlord_id=landlord_id,
    )


def test_database_sink_persists_notification(db_session, session_factory, landlord):
    event = tenant_left(landlord.id, room_number=3)

    DatabaseNotificationSink(session_factory).emit_tenant_left(event)

    [notification] = list_notifications(db_session, recipient_id=landlord.id)
    assert notification.type == NotificationType.TENANT_LEFT
    assert notification.title == "Student Left Room"
    assert notification.message == "Remi has left room 3 at 4 Quad Lane"
    assert notification.data["propertyId"] == str(event.property_id)
    assert notification.data["landlordId"] == str(landlord.id)


class FailingSession:
    def add(self, instance):
        raise RuntimeError("database is locked")

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


def test_database_sink_gives_up_quietly(landlord, caplog):
    sessions = []

    def session_factory():
        sessions.append(FailingSession())
        return sessions[-1]

    DatabaseNotificationSink(session_factory, max_retries=3).emit_tenant_left(tenant_left(landlord.id))

    assert len(sessions) == 3
    assert "Giving up" in caplog.text


@pytest.fixture()
def landlord_notifications(db_session, landlord, make_user):
    other = make_user(UserType.LANDLORD)
    mine_property = uuid.uuid4()
    rows = [
        Notification(type=NotificationType.TENANT_LEFT, title="Student Left Room", message="one",
                     recipient_id=landlord.id, payload=f'{{"propertyId": "{mine_property}"}}'),
        Notification(type=NotificationType.TENANT_LEFT, title="Student Left Room", message="two",
                     recipient_id=landlord.id, payload='{"propertyId": "elsewhere"}'),
        Notification(type=NotificationType.TENANT_LEFT, title="Student Left Room", message="three",
                     recipient_id=other.id, payload=None),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {"rows": rows, "property_id": mine_property, "other": other}


def test_landlord_sees_only_own_notifications(client, landlord, landlord_notifications, auth_headers):
    response = client.get("/api/notifications/", headers=auth_headers(landlord))

    assert response.status_code == 200
    assert sorted(n["message"] for n in response.json()["notifications"]) == ["one", "two"]

    response = client.get(
        "/api/notifications/",
        params={"property_id": str(landlord_notifications["property_id"])},
        headers=auth_headers(landlord),
    )
    assert [n["message"] for n in response.json()["notifications"]] == ["one"]


def test_admin_sees_every_notification(client, make_user, landlord_notifications, auth_headers):
    admin = make_user(UserType.ADMIN)

    response = client.get("/api/notifications/", headers=auth_headers(admin))

    assert len(response.json()["notifications"]) == 3


def test_students_cannot_read_notifications(client, make_student, auth_headers):
    response = client.get("/api/notifications/", headers=auth_headers(make_student()))
    assert response.status_code == 403


def test_mark_read(client, landlord, landlord_notifications, auth_headers):
    headers = auth_headers(landlord)
    mine = landlord_notifications["rows"][0]
    theirs = landlord_notifications["rows"][2]

    response = client.post("/api/notifications/mark-read", json={
        "notification_ids": [str(mine.id), str(theirs.id)]
    }, headers=headers)
    assert response.status_code == 200
    assert response.json()["count"] == 1

    response = client.get("/api/notifications/", params={"unread": True}, headers=headers)
    assert [n["message"] for n in response.json()["notifications"]] == ["two"]

    response = client.post("/api/notifications/mark-all-read", headers=headers)
    assert response.json()["count"] == 1

    response = client.get("/api/notifications/", params={"unread": True}, headers=headers)
    assert response.json()["notifications"] == []


def test_mark_read_requires_ids(client, landlord, auth_headers):
    response = client.post(
        "/api/notifications/mark-read", json={"notification_ids": []}, headers=auth_headers(landlord)
    )
    assert response.status_code == 422
