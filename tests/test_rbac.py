from fastapi.testclient import TestClient

import oms.api.notifications as notifications_api
from oms.main import app
from tests.helpers import auth_headers, create_account, create_admin


def test_missing_token_is_401():
    client = TestClient(app)
    r = client.get("/api/employees/profile")
    assert r.status_code == 401
    assert r.json()["detail"] == "No token provided"


def test_garbage_token_is_401():
    client = TestClient(app)
    r = client.get("/api/employees/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token"


def test_deactivated_user_is_rejected(db_session):
    user, _ = create_account(db_session, "e@example.com")
    user.is_active = False
    db_session.commit()

    client = TestClient(app)
    r = client.get("/api/auth/me", headers=auth_headers(user))
    assert r.status_code == 401


def test_admin_routes_forbidden_for_employees(db_session):
    user, _ = create_account(db_session, "e@example.com")
    client = TestClient(app)
    for path in ("/api/employees/all", "/api/invitations", "/api/tasks", "/api/leaves/all", "/api/meetings/all"):
        r = client.get(path, headers=auth_headers(user))
        assert r.status_code == 403, path
        assert r.json()["detail"] == "Access denied. Admin privileges required."


def test_admin_routes_ok_for_admins(db_session):
    admin, _ = create_admin(db_session)
    client = TestClient(app)
    for path in ("/api/employees/all", "/api/invitations", "/api/tasks", "/api/leaves/all", "/api/meetings/all"):
        assert client.get(path, headers=auth_headers(admin)).status_code == 200, path


def test_unhandled_errors_become_generic_500(db_session, monkeypatch):
    user, _ = create_account(db_session, "e@example.com")

    def boom(**kwargs):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(notifications_api, "stats_by_type", boom)
    client = TestClient(app, raise_server_exceptions=False)
    r = client.get("/api/notifications/stats", headers=auth_headers(user))
    assert r.status_code == 500
    assert r.json() == {"detail": "Server error"}
