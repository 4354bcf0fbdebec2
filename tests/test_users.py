import uuid


def test_user_profile(client, make_student, landlord, auth_headers):
    student = make_student(name="Ife", gender="FEMALE", religion="CHRISTIAN")

    response = client.get(f"/api/users/{student.id}", headers=auth_headers(landlord))

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(student.id)
    assert body["name"] == "Ife"
    assert body["email"] == student.email
    assert body["user_type"] == "STUDENT"
    assert body["gender"] == "FEMALE"
    assert body["religion"] == "CHRISTIAN"
    assert "hashed_password" not in body


def test_user_profile_errors(client, landlord, auth_headers):
    response = client.get(f"/api/users/{uuid.uuid4()}", headers=auth_headers(landlord))
    assert response.status_code == 404

    assert client.get(f"/api/users/{landlord.id}").status_code == 401
    assert client.get("/api/users/not-a-uuid", headers=auth_headers(landlord)).status_code == 422


def test_user_edits_own_profile(client, make_student, auth_headers):
    student = make_student(name="Old Name")

    response = client.put(
        f"/api/users/{student.id}",
        json={"name": "New Name", "gender": "MALE", "religion": "muslim"},
        headers=auth_headers(student),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "New Name"
    assert body["gender"] == "MALE"
    assert body["religion"] == "MUSLIM"
    assert client.get(f"/api/users/{student.id}", headers=auth_headers(student)).json()["name"] == "New Name"


def test_user_cannot_edit_someone_else(client, make_student, landlord, auth_headers):
    student = make_student(name="Kept")

    response = client.put(f"/api/users/{student.id}", json={"name": "Hijacked"}, headers=auth_headers(landlord))

    assert response.status_code == 403
    assert client.get(f"/api/users/{student.id}", headers=auth_headers(landlord)).json()["name"] == "Kept"
