from app.models.property import PropertyStatus
from app.models.user import UserType

LISTING = {
    "location": "7 Campus Way",
    "description": "Close to the library",
    "price": 350.0,
    "bedrooms": 3,
    "bathrooms": 1,
    "room_sharing": False,
    "tenants_per_room": 4,
    "gender": "female",
}


def test_landlord_creates_property(client, landlord, auth_headers):
    response = client.post("/api/properties/", json=LISTING, headers=auth_headers(landlord))

    assert response.status_code == 201
    body = response.json()
    assert body["owner_id"] == str(landlord.id)
    assert body["tenants_per_room"] == 1
    assert body["gender"] == "FEMALE"
    assert body["religion"] == "ANY"
    assert body["current_occupants"] == 0
    assert body["status"] == "AVAILABLE"


def test_student_cannot_create_property(client, make_student, auth_headers):
    response = client.post("/api/properties/", json=LISTING, headers=auth_headers(make_student()))
    assert response.status_code == 403


def test_list_properties_filters(client, landlord, make_student, make_property, auth_headers):
    make_property(landlord, location="Cheap", price=200.0)
    make_property(landlord, location="Shared", price=300.0, room_sharing=True, tenants_per_room=2)
    make_property(landlord, location="Closed", price=250.0, status=PropertyStatus.MAINTENANCE)
    headers = auth_headers(make_student())

    response = client.get("/api/properties/")
    assert response.status_code == 200
    assert len(response.json()) == 3

    response = client.get("/api/properties/", params={"room_sharing": True}, headers=headers)
    assert [p["location"] for p in response.json()] == ["Shared"]

    response = client.get("/api/properties/", params={"status": "AVAILABLE", "max_price": 250}, headers=headers)
    assert [p["location"] for p in response.json()] == ["Cheap"]


def test_list_my_properties(client, landlord, make_user, make_property, auth_headers):
    make_property(landlord, location="Mine")
    make_property(make_user(UserType.LANDLORD), location="Theirs")

    response = client.get("/api/properties/mine", headers=auth_headers(landlord))

    assert [p["location"] for p in response.json()] == ["Mine"]


def test_property_detail_includes_allocation(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2, room_sharing=True, tenants_per_room=2, price=300.0)

    response = client.get(f"/api/properties/{prop.id}", headers=auth_headers(make_student()))

    assert response.status_code == 200
    allocation = response.json()["allocation"]
    assert allocation["total_rooms"] == 2
    assert allocation["max_occupants"] == 4
    assert allocation["remaining_occupant_slots"] == 4
    assert allocation["is_shared"] is True
    assert allocation["price_per_room"] == 300.0


def test_property_not_found(client, landlord, auth_headers):
    response = client.get(
        "/api/properties/00000000-0000-0000-0000-000000000000", headers=auth_headers(landlord)
    )
    assert response.status_code == 404


def test_update_property(client, landlord, make_user, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2)

    response = client.put(
        f"/api/properties/{prop.id}",
        json={"price": 420.0, "religion": "christian"},
        headers=auth_headers(landlord),
    )
    assert response.status_code == 200
    assert response.json()["price"] == 420.0
    assert response.json()["religion"] == "CHRISTIAN"

    response = client.put(
        f"/api/properties/{prop.id}",
        json={"price": 100.0},
        headers=auth_headers(make_user(UserType.LANDLORD)),
    )
    assert response.status_code == 403


def test_update_cannot_shrink_below_occupants(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2)
    headers = auth_headers(landlord)
    for room in (1, 2):
        response = client.post("/api/allocations/allocate", json={
            "property_id": str(prop.id),
            "user_id": str(make_student().id),
            "room_number": room,
        }, headers=headers)
        assert response.status_code == 200

    response = client.put(f"/api/properties/{prop.id}", json={"bedrooms": 1}, headers=headers)

    assert response.status_code == 409


def test_rooms_overview(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=2, room_sharing=True, tenants_per_room=2)
    student = make_student(name="Kim", gender="FEMALE")
    client.post("/api/allocations/allocate", json={
        "property_id": str(prop.id),
        "user_id": str(student.id),
        "room_number": 2,
    }, headers=auth_headers(landlord))

    response = client.get(f"/api/properties/{prop.id}/rooms", headers=auth_headers(landlord))

    assert response.status_code == 200
    body = response.json()
    assert body["rooms"][1]["occupants"][0]["name"] == "Kim"
    assert body["rooms"][1]["available"] is True
    assert body["summary"]["partially_occupied_rooms"] == 1
    assert body["summary"]["empty_rooms"] == 1

    response = client.get(f"/api/properties/{prop.id}/rooms", headers=auth_headers(student))
    assert response.status_code == 403
    assert response.json()["detail"]["rule"] == "property_owner"


def allocate_via_api(client, headers, prop, student, room):
    return client.post("/api/allocations/allocate", json={
        "property_id": str(prop.id),
        "user_id": str(student.id),
        "room_number": room,
    }, headers=headers)


def test_update_cannot_overfill_a_shared_room(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=3, room_sharing=True, tenants_per_room=2)
    headers = auth_headers(landlord)
    for _ in range(2):
        assert allocate_via_api(client, headers, prop, make_student(), 1).status_code == 200

    response = client.put(f"/api/properties/{prop.id}", json={"room_sharing": False}, headers=headers)

    assert response.status_code == 409
    assert response.json()["detail"]["rule"] == "room_capacity"
    body = client.get(f"/api/properties/{prop.id}", headers=headers).json()
    assert body["room_sharing"] is True
    assert body["tenants_per_room"] == 2


def test_update_cannot_remove_an_occupied_room(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=3)
    headers = auth_headers(landlord)
    assert allocate_via_api(client, headers, prop, make_student(), 3).status_code == 200

    response = client.put(f"/api/properties/{prop.id}", json={"bedrooms": 2}, headers=headers)

    assert response.status_code == 409
    assert response.json()["detail"]["rule"] == "room_number"
    assert client.get(f"/api/properties/{prop.id}", headers=headers).json()["bedrooms"] == 3


def test_update_allows_capacity_that_still_fits(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord, bedrooms=3, room_sharing=True, tenants_per_room=3)
    headers = auth_headers(landlord)
    for _ in range(2):
        assert allocate_via_api(client, headers, prop, make_student(), 1).status_code == 200

    response = client.put(
        f"/api/properties/{prop.id}", json={"tenants_per_room": 2, "bedrooms": 2}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["tenants_per_room"] == 2
    assert response.json()["bedrooms"] == 2
