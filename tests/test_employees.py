import uuid

from fastapi.testclient import TestClient

from oms.main import app
from tests.helpers import auth_headers, create_account, create_admin

PNG = b"\x89PNG\r\n\x1a\n fake image bytes"


def test_get_and_update_own_profile(db_session):
    user, employee = create_account(db_session, "e@example.com", full_name="Grace Hopper")
    client = TestClient(app)

    r = client.get("/api/employees/profile", headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["full_name"] == "Grace Hopper"
    assert r.json()["profile_picture_url"] is None

    r = client.put(
        "/api/employees/profile",
        json={
            "phone": "555-0100",
            "position": "Engineer",
            "emergency_contact": {"name": "Alan", "phone": "555-0199"},
        },
        headers=auth_headers(user),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["phone"] == "555-0100"
    assert body["position"] == "Engineer"
    assert body["emergency_contact"] == {"name": "Alan", "phone": "555-0199"}
    assert body["full_name"] == "Grace Hopper"


def test_start_date_cannot_be_changed(db_session):
    user, employee = create_account(db_session, "e@example.com")
    original = employee.start_date
    client = TestClient(app)

    r = client.put(
        "/api/employees/profile",
        json={"start_date": "2020-01-01T00:00:00", "address": "1 Main St"},
        headers=auth_headers(user),
    )
    assert r.status_code == 200
    db_session.refresh(employee)
    assert employee.start_date == original
    assert employee.address == "1 Main St"


def test_profile_requires_employee_record(db_session):
    user, employee = create_account(db_session, "e@example.com", with_steps=False)
    db_session.delete(employee)
    db_session.commit()
    client = TestClient(app)

    r = client.get("/api/employees/profile", headers=auth_headers(user))
    assert r.status_code == 404


def test_profile_picture_upload_serve_and_delete(db_session, upload_dir):
    user, employee = create_account(db_session, "e@example.com")
    client = TestClient(app)

    r = client.post(
        "/api/employees/profile/picture",
        files={"image": ("me.png", PNG, "image/png")},
        headers=auth_headers(user),
    )
    assert r.status_code == 200, r.text
    url = r.json()["profile_picture_url"]
    assert url == f"/api/employees/{employee.id}/picture"

    r = client.get(url, headers=auth_headers(user))
    assert r.status_code == 200
    assert r.content == PNG

    stored = list((upload_dir / "profile-pictures").iterdir())
    assert len(stored) == 1

    r = client.delete("/api/employees/profile/picture", headers=auth_headers(user))
    assert r.status_code == 200
    assert list((upload_dir / "profile-pictures").iterdir()) == []

    r = client.delete("/api/employees/profile/picture", headers=auth_headers(user))
    assert r.status_code == 404


def test_replacing_picture_removes_old_file(db_session, upload_dir):
    user, _ = create_account(db_session, "e@example.com")
    client = TestClient(app)
    for _ in range(2):
        client.post(
            "/api/employees/profile/picture",
            files={"image": ("me.jpg", PNG, "image/jpeg")},
            headers=auth_headers(user),
        )
    assert len(list((upload_dir / "profile-pictures").iterdir())) == 1


def test_picture_must_be_an_image(db_session):
    user, _ = create_account(db_session, "e@example.com")
    client = TestClient(app)
    r = client.post(
        "/api/employees/profile/picture",
        files={"image": ("cv.pdf", b"%PDF", "application/pdf")},
        headers=auth_headers(user),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Only image files are allowed"


def test_admin_employee_routes(db_session):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "e@example.com")
    client = TestClient(app)

    r = client.get("/api/employees/all", headers=auth_headers(admin))
    assert r.status_code == 200
    assert {e["email"] for e in r.json()} == {"admin@example.com", "e@example.com"}

    r = client.get(f"/api/employees/{employee.id}", headers=auth_headers(admin))
    assert r.json()["user_role"] == "employee"
    assert r.json()["user_is_active"] is True

    r = client.put(f"/api/employees/{employee.id}", json={"department": "Sales"}, headers=auth_headers(admin))
    assert r.json()["department"] == "Sales"

    r = client.put(
        f"/api/employees/{employee.id}/status",
        json={"onboarding_status": "rejected"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["onboarding_status"] == "rejected"

    r = client.put(
        f"/api/employees/{employee.id}/status",
        json={"onboarding_status": "archived"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 400

    r = client.get(f"/api/employees/{uuid.uuid4()}", headers=auth_headers(admin))
    assert r.status_code == 404

    assert client.get("/api/employees/all", headers=auth_headers(user)).status_code == 403


def test_full_name_cannot_be_nulled(db_session):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "e@example.com", full_name="Grace Hopper")
    client = TestClient(app)

    r = client.put("/api/employees/profile", json={"full_name": None}, headers=auth_headers(user))
    assert r.status_code == 400
    assert r.json()["detail"].startswith("full_name")

    r = client.put(f"/api/employees/{employee.id}", json={"full_name": None}, headers=auth_headers(admin))
    assert r.status_code == 400
    assert r.json()["detail"].startswith("full_name")

    db_session.refresh(employee)
    assert employee.full_name == "Grace Hopper"
