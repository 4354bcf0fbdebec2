import uuid

from app.models.user import UserType


def post_review(client, headers, prop, rating, comment=""):
    return client.post("/api/reviews/", json={
        "property_id": str(prop.id),
        "rating": rating,
        "comment": comment,
    }, headers=headers)


def test_student_reviews_property(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    student = make_student(name="Rae")

    response = post_review(client, auth_headers(student), prop, 4, "Quiet and clean")

    assert response.status_code == 201
    body = response.json()
    assert body["rating"] == 4
    assert body["comment"] == "Quiet and clean"
    assert body["user"] == {"id": str(student.id), "name": "Rae", "user_type": "STUDENT"}


def test_only_students_review(client, landlord, make_property, auth_headers):
    prop = make_property(landlord)

    response = post_review(client, auth_headers(landlord), prop, 5)

    assert response.status_code == 403


def test_one_review_per_student_and_property(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    headers = auth_headers(make_student())
    assert post_review(client, headers, prop, 3).status_code == 201

    response = post_review(client, headers, prop, 5)

    assert response.status_code == 400
    assert "already reviewed" in response.json()["detail"]


def test_review_validation(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    headers = auth_headers(make_student())

    assert post_review(client, headers, prop, 0).status_code == 422
    assert post_review(client, headers, prop, 6).status_code == 422
    response = client.post("/api/reviews/", json={"property_id": str(uuid.uuid4()), "rating": 3}, headers=headers)
    assert response.status_code == 404


def test_list_reviews_with_average(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    for rating in (5, 4, 4):
        post_review(client, auth_headers(make_student()), prop, rating)
    headers = auth_headers(landlord)

    response = client.get("/api/reviews/", params={"property_id": str(prop.id)}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total_reviews"] == 3
    assert body["average_rating"] == 4.3
    assert sorted(r["rating"] for r in body["reviews"]) == [4, 4, 5]

    empty = make_property(landlord, location="Nobody yet")
    body = client.get("/api/reviews/", params={"property_id": str(empty.id)}, headers=headers).json()
    assert body["total_reviews"] == 0
    assert body["average_rating"] == 0

    response = client.get("/api/reviews/", params={"property_id": str(uuid.uuid4())}, headers=headers)
    assert response.status_code == 404
    assert client.get("/api/reviews/", params={"property_id": str(prop.id)}).status_code == 401


def test_author_edits_and_deletes_review(client, landlord, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    author = auth_headers(make_student())
    review_id = post_review(client, author, prop, 2, "Noisy").json()["id"]
    stranger = auth_headers(make_student())

    response = client.put(f"/api/reviews/{review_id}", json={"rating": 5, "comment": "Fixed"}, headers=stranger)
    assert response.status_code == 403

    response = client.put(f"/api/reviews/{review_id}", json={"rating": 5, "comment": "Fixed"}, headers=author)
    assert response.status_code == 200
    assert response.json()["rating"] == 5
    assert response.json()["comment"] == "Fixed"

    assert client.delete(f"/api/reviews/{review_id}", headers=stranger).status_code == 403
    assert client.delete(f"/api/reviews/{review_id}", headers=author).status_code == 200
    assert client.delete(f"/api/reviews/{review_id}", headers=author).status_code == 404
    body = client.get("/api/reviews/", params={"property_id": str(prop.id)}, headers=author).json()
    assert body["total_reviews"] == 0


def test_landlord_cannot_edit_student_review(client, landlord, make_user, make_student, make_property, auth_headers):
    prop = make_property(landlord)
    review_id = post_review(client, auth_headers(make_student()), prop, 1).json()["id"]

    response = client.put(
        f"/api/reviews/{review_id}", json={"rating": 5}, headers=auth_headers(make_user(UserType.LANDLORD))
    )

    assert response.status_code == 403
