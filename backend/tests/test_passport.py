import pytest

from conftest import PNG_BYTES

PASSPORT_FORM = {
    "passport_type": "P",
    "country_code": "IND",
    "passport_number": "Z1234567",
    "full_name": "Dana Driver",
    "nationality": "Indian",
    "sex": "F",
    "date_of_birth": "1990-05-17",
    "place_of_birth": "Pune",
    "date_of_issue": "2020-01-10",
    "date_of_expiry": "2030-01-09",
    "place_of_issue": "Mumbai",
    "father_name": "Ravi Driver",
    "address": "12 Harbour Road",
}


def image(name="photo.png", content_type="image/png", data=PNG_BYTES):
    return (name, data, content_type)


@pytest.fixture
def passport(client, user_headers):
    response = client.post(
        "/api/passport",
        data=PASSPORT_FORM,
        files={"passport_photo": image(), "signature": image("sign.jpg", "image/jpeg")},
        headers=user_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["passport"]


def test_create_stores_fields_and_files(passport, passport_storage):
    assert passport["passport_number"] == "Z1234567"
    assert passport["date_of_birth"] == "1990-05-17"
    assert passport["spouse_name"] is None
    assert passport["passport_photo"].startswith("passport_photo-")
    assert passport["signature"].startswith("signature-")
    assert passport_storage.path_for(passport["passport_photo"]).read_bytes() == PNG_BYTES
    assert passport_storage.path_for(passport["signature"]).exists()


def test_create_twice_is_rejected(client, user_headers, passport):
    response = client.post("/api/passport", data=PASSPORT_FORM, headers=user_headers)
    assert response.status_code == 400


def test_create_rejects_bad_date_and_bad_file(client, user_headers):
    bad_date = client.post(
        "/api/passport", data={**PASSPORT_FORM, "date_of_birth": "17/05/1990"}, headers=user_headers
    )
    bad_file = client.post(
        "/api/passport",
        data=PASSPORT_FORM,
        files={"passport_photo": image("photo.gif", "image/gif")},
        headers=user_headers,
    )

    assert bad_date.status_code == 400
    assert bad_file.status_code == 400
    assert client.get("/api/passport/me", headers=user_headers).status_code == 404


def test_get_mine(client, user_headers, passport):
    response = client.get("/api/passport/me", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["passport"]["id"] == passport["id"]


def test_get_mine_without_record(client, user_headers):
    assert client.get("/api/passport/me", headers=user_headers).status_code == 404


def test_update_only_touches_submitted_fields(client, user_headers, passport):
    response = client.put(
        "/api/passport/me", data={"place_of_issue": "Delhi"}, headers=user_headers
    )

    updated = response.json()["passport"]
    assert response.status_code == 200
    assert updated["place_of_issue"] == "Delhi"
    assert updated["passport_number"] == passport["passport_number"]
    assert updated["address"] == passport["address"]
    assert updated["passport_photo"] == passport["passport_photo"]


def test_update_with_empty_values_keeps_stored_fields(client, user_headers, passport):
    response = client.put(
        "/api/passport/me",
        data={"full_name": "", "address": "", "place_of_issue": "Delhi"},
        headers=user_headers,
    )

    updated = response.json()["passport"]
    assert response.status_code == 200
    assert updated["full_name"] == "Dana Driver"
    assert updated["address"] == "12 Harbour Road"
    assert updated["place_of_issue"] == "Delhi"


def test_update_with_only_empty_values_is_rejected(client, user_headers, passport):
    form = {field: "" for field in PASSPORT_FORM}

    response = client.put("/api/passport/me", data=form, headers=user_headers)

    assert response.status_code == 400
    mine = client.get("/api/passport/me", headers=user_headers).json()["passport"]
    assert mine["full_name"] == "Dana Driver"


def test_update_clears_fields_named_in_clear_fields(client, user_headers, passport):
    response = client.put(
        "/api/passport/me",
        data={"clear_fields": "father_name", "spouse_name": "Sam Driver"},
        headers=user_headers,
    )

    updated = response.json()["passport"]
    assert response.status_code == 200
    assert updated["father_name"] is None
    assert updated["spouse_name"] == "Sam Driver"
    assert updated["full_name"] == passport["full_name"]


def test_update_rejects_clearing_unknown_field(client, user_headers, passport):
    response = client.put(
        "/api/passport/me", data={"clear_fields": "password_hash"}, headers=user_headers
    )
    assert response.status_code == 400


def test_update_replaces_photo_and_removes_old_file(client, user_headers, passport, passport_storage):
    old_photo = passport_storage.path_for(passport["passport_photo"])

    response = client.put(
        "/api/passport/me",
        files={"passport_photo": image("new.png")},
        headers=user_headers,
    )

    updated = response.json()["passport"]
    assert response.status_code == 200
    assert updated["passport_photo"] != passport["passport_photo"]
    assert passport_storage.path_for(updated["passport_photo"]).exists()
    assert not old_photo.exists()
    assert updated["signature"] == passport["signature"]


def test_update_without_fields(client, user_headers, passport):
    response = client.put("/api/passport/me", data={}, headers=user_headers)
    assert response.status_code == 400


def test_update_without_record(client, user_headers):
    response = client.put("/api/passport/me", data={"sex": "M"}, headers=user_headers)
    assert response.status_code == 404


def test_list_all_is_admin_only_and_includes_owner(client, user_headers, admin_headers, passport):
    assert client.get("/api/passport/all", headers=user_headers).status_code == 403

    response = client.get("/api/passport/all", headers=admin_headers)

    passports = response.json()["passports"]
    assert response.status_code == 200
    assert len(passports) == 1
    assert passports[0]["email"] == "driver@example.com"
    assert passports[0]["id"] == passport["id"]


def test_admin_delete_removes_record_and_files(client, user_headers, admin_headers, passport, passport_storage):
    photo = passport_storage.path_for(passport["passport_photo"])
    signature = passport_storage.path_for(passport["signature"])

    assert client.delete(f"/api/passport/{passport['id']}", headers=user_headers).status_code == 403
    response = client.delete(f"/api/passport/{passport['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert not photo.exists()
    assert not signature.exists()
    assert client.get("/api/passport/me", headers=user_headers).status_code == 404
    assert client.delete(f"/api/passport/{passport['id']}", headers=admin_headers).status_code == 404


def test_stored_photo_is_served(client, passport):
    response = client.get(f"/uploads/passports/{passport['passport_photo']}")

    assert response.status_code == 200
    assert response.content == PNG_BYTES
