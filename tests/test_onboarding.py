from fastapi.testclient import TestClient

from oms.main import app
from oms.models.employee import Employee
from tests.helpers import auth_headers, create_account, create_admin


def test_steps_are_ordered(db_session):
    user, _ = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    r = client.get("/api/onboarding/steps", headers=auth_headers(user))
    assert r.status_code == 200
    steps = r.json()
    assert [s["step_name"] for s in steps] == [
        "Complete Profile",
        "Upload Documents",
        "Company Policies",
        "IT Setup",
        "Team Introduction",
    ]
    assert all(not s["completed"] for s in steps)


def test_completing_steps_drives_onboarding_status(db_session):
    user, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    headers = auth_headers(user)
    steps = client.get("/api/onboarding/steps", headers=headers).json()

    r = client.put(f"/api/onboarding/steps/{steps[0]['id']}/complete", headers=headers)
    assert r.status_code == 200
    assert r.json()["completed"] is True
    assert r.json()["completed_at"] is not None

    status = client.get("/api/onboarding/status", headers=headers).json()
    assert status == {"status": "in-progress", "progress": 20.0, "total_steps": 5, "completed_steps": 1}

    for step in steps[1:-1]:
        client.put(f"/api/onboarding/steps/{step['id']}/complete", headers=headers)
    assert client.get("/api/onboarding/status", headers=headers).json()["status"] == "in-progress"

    # the last incomplete step flips the aggregate in the same call
    client.put(f"/api/onboarding/steps/{steps[-1]['id']}/complete", headers=headers)
    db_session.expire_all()
    assert db_session.get(Employee, employee.id).onboarding_status == "completed"
    status = client.get("/api/onboarding/status", headers=headers).json()
    assert status["progress"] == 100.0


def test_completing_again_keeps_step_complete(db_session):
    user, _ = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    headers = auth_headers(user)
    step_id = client.get("/api/onboarding/steps", headers=headers).json()[0]["id"]
    client.put(f"/api/onboarding/steps/{step_id}/complete", headers=headers)
    r = client.put(f"/api/onboarding/steps/{step_id}/complete", headers=headers)
    assert r.status_code == 200
    assert client.get("/api/onboarding/status", headers=headers).json()["completed_steps"] == 1


def test_cannot_complete_someone_elses_step(db_session):
    user, _ = create_account(db_session, "emp@example.com")
    other, _ = create_account(db_session, "other@example.com")
    client = TestClient(app)
    step_id = client.get("/api/onboarding/steps", headers=auth_headers(other)).json()[0]["id"]

    r = client.put(f"/api/onboarding/steps/{step_id}/complete", headers=auth_headers(user))
    assert r.status_code == 404
    assert r.json()["detail"] == "Onboarding step not found"


def test_status_with_no_steps_is_zero(db_session):
    user, _ = create_account(db_session, "emp@example.com", with_steps=False)
    client = TestClient(app)
    r = client.get("/api/onboarding/status", headers=auth_headers(user))
    assert r.json()["progress"] == 0
    assert r.json()["total_steps"] == 0


def test_admin_manages_employee_checklist(db_session):
    admin, _ = create_admin(db_session)
    _, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    headers = auth_headers(admin)

    steps = client.get(f"/api/onboarding/employee/{employee.id}/steps", headers=headers).json()
    assert len(steps) == 5
    r = client.put(f"/api/onboarding/employee/{employee.id}/steps/{steps[2]['id']}/complete", headers=headers)
    assert r.status_code == 200
    status = client.get(f"/api/onboarding/employee/{employee.id}/status", headers=headers).json()
    assert status["completed_steps"] == 1


def test_admin_routes_need_admin(db_session):
    user, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    r = client.get(f"/api/onboarding/employee/{employee.id}/steps", headers=auth_headers(user))
    assert r.status_code == 403
