from app.models.property import PropertyStatus
from app.models.user import UserType


def allocate(client, headers, prop, student, room_number, **extra):
    return client.post("/api/allocations/allocate", json={
        "property_id": str(prop.id),
        "user_id": str(student.id),
        "room_number": room_number,
        **extra,
    }, headers=headers)


def test_allocate_room(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2, price=380.0)
    student = make_student(name="Ola")

    response = allocate(client, auth_headers(landlord), prop, student, 1)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Room allocated successfully"
    assert body["data"]["occupant"]["room_number"] == 1
    assert body["data"]["occupant"]["status"] == "ACTIVE"
    assert body["data"]["occupant"]["user"]["name"] == "Ola"
    assert body["data"]["property"]["current_occupants"] == 1
    assert body["data"]["allocation"]["occupied_rooms"] == 1


def test_allocate_error_mapping(client, landlord, make_user, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=1)
    headers = auth_headers(landlord)
    allocate(client, headers, prop, make_student(), 1)

    response = allocate(client, headers, prop, make_student(), 1)
    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "CONFLICT"
    assert response.json()["detail"]["rule"] == "room_capacity"

    response = allocate(client, headers, prop, make_student(), 2)
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "INVALID_ARGUMENT"

    other = make_user(UserType.LANDLORD)
    response = allocate(client, auth_headers(other), prop, make_student(), 1)
    assert response.status_code == 403
    assert response.json()["detail"]["kind"] == "UNAUTHORIZED"

    maintenance = make_property(landlord, status=PropertyStatus.MAINTENANCE)
    response = allocate(client, headers, maintenance, make_student(), 1)
    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "INVALID_STATE"


def test_allocate_requires_landlord(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    student = make_student()

    assert allocate(client, auth_headers(student), prop, student, 1).status_code == 403
    assert allocate(client, {}, prop, student, 1).status_code == 401


def test_allocate_rejects_malformed_body(client, landlord, auth_headers):
    response = client.post("/api/allocations/allocate", json={
        "property_id": "not-a-uuid",
        "room_number": 1,
    }, headers=auth_headers(landlord))
    assert response.status_code == 422


def test_unallocate_and_notify_landlord(client, db_session, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2, location="9 River Street")
    student = make_student(name="Jo")
    headers = auth_headers(landlord)
    allocate(client, headers, prop, student, 2)

    response = client.post("/api/allocations/unallocate", json={
        "property_id": str(prop.id),
        "user_id": str(student.id),
    }, headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["occupant"]["status"] == "INACTIVE"
    assert data["occupant"]["end_date"] is not None
    assert data["property"]["current_occupants"] == 0
    assert data["property"]["status"] == "AVAILABLE"

    notifications = client.get("/api/notifications/", headers=headers).json()["notifications"]
    assert len(notifications) == 1
    notification = notifications[0]
    assert notification["type"] == "TENANT_LEFT"
    assert notification["message"] == "Jo has left room 2 at 9 River Street"
    assert notification["read"] is False
    assert notification["data"]["studentId"] == str(student.id)
    assert notification["data"]["roomNumber"] == 2

    response = client.post("/api/allocations/unallocate", json={
        "property_id": str(prop.id),
        "user_id": str(student.id),
    }, headers=headers)
    assert response.status_code == 404


def test_student_leave_flow(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2)
    student = make_student()
    occupant_id = allocate(client, auth_headers(landlord), prop, student, 1).json()["data"]["occupant"]["id"]
    headers = auth_headers(student)

    response = client.get(f"/api/allocations/student/{student.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["occupant"]["id"] == occupant_id

    response = client.get(
        "/api/allocations/check",
        params={"property_id": str(prop.id), "user_id": str(student.id)},
        headers=headers,
    )
    assert response.json()["is_active"] is True

    response = client.post("/api/allocations/leave", json={"occupant_id": occupant_id}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["occupant"]["status"] == "INACTIVE"

    response = client.get(f"/api/allocations/student/{student.id}", headers=headers)
    assert response.status_code == 404

    response = client.get(
        "/api/allocations/check",
        params={"property_id": str(prop.id), "user_id": str(student.id)},
        headers=headers,
    )
    assert response.json() == {"is_active": False, "occupant": None}


def test_check_allocation_tolerates_bad_ids(client, landlord, auth_headers):
    response = client.get(
        "/api/allocations/check", params={"property_id": "x"}, headers=auth_headers(landlord)
    )
    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_landlord_occupants_listing(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, location="Elm Court")
    headers = auth_headers(landlord)
    allocate(client, headers, prop, make_student(), 1)
    allocate(client, headers, prop, make_student(), 2)

    response = client.get("/api/allocations/occupants", headers=headers)

    assert response.status_code == 200
    assert [o["room_number"] for o in response.json()] == [1, 2]
    assert response.json()[0]["property"]["location"] == "Elm Court"
