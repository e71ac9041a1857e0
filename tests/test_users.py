from formbuilder.models.form import Form
from tests.helpers import SHORT_ANSWER


def create_user(client, email="owner@example.com", name="Owner"):
    response = client.post("/api/users", json={"email": email, "name": name})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_user(client):
    user = create_user(client, email="  Owner@Example.com ")

    assert user["email"] == "owner@example.com"
    assert user["name"] == "Owner"
    assert isinstance(user["id"], int)


def test_duplicate_or_malformed_email_is_rejected(client):
    create_user(client)

    duplicate = client.post("/api/users", json={"email": "OWNER@example.com"})
    malformed = client.post("/api/users", json={"email": "not-an-email"})

    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "User with this email already exists"
    assert malformed.status_code == 400


def test_forms_are_listed_by_creator(client, create_form, db):
    alice = create_user(client, email="alice@example.com")
    bob = create_user(client, email="bob@example.com")
    first = create_form(title="First", createdBy=alice["id"])
    second = create_form(title="Second", createdBy=alice["id"])
    create_form(title="Bob's", createdBy=bob["id"])
    create_form(title="Anonymous")

    listed = client.get(f"/api/forms/user/{alice['id']}")

    assert listed.status_code == 200
    assert {form["formId"] for form in listed.json()} == {first, second}
    assert all("ownerAccessLink" not in form for form in listed.json())
    assert db.get(Form, first).created_by == alice["id"]


def test_listing_unknown_user_is_not_found(client):
    assert client.get("/api/forms/user/999").status_code == 404


def test_form_with_unknown_creator_is_rejected(client):
    response = client.post("/api/forms", json={"title": "T", "fields": [SHORT_ANSWER], "createdBy": 42})

    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown user: 42"
