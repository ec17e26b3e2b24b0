from datetime import timedelta

from fastapi.testclient import TestClient

from oms.core.tasks import update_progress
from oms.main import app
from oms.models.notification import Notification
from oms.models.task import Task
from tests.helpers import NOW, auth_headers, break_commits, create_account, create_admin, create_task


def _setup(db_session, **task_kwargs):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "emp@example.com")
    task = create_task(db_session, assignee=employee, assigner=admin, due_date=NOW + timedelta(days=7), **task_kwargs)
    return admin, user, employee, task


def test_admin_creates_task_and_assignee_is_notified(db_session):
    admin, _ = create_admin(db_session)
    _, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    r = client.post(
        "/api/tasks",
        json={
            "title": "Set up laptop",
            "description": "Install the toolchain and request VPN access",
            "assigned_to": str(employee.id),
            "priority": "high",
            "due_date": (NOW + timedelta(days=3)).isoformat(),
        },
        headers=auth_headers(admin),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "assigned"
    assert body["progress"] == 0
    assert body["assigned_to"]["id"] == str(employee.id)

    n = db_session.query(Notification).one()
    assert n.type == "task"
    assert n.related_model == "Task"
    assert str(n.related_id) == body["id"]


def test_create_task_rejects_past_due_date_and_unknown_assignee(db_session):
    admin, _ = create_admin(db_session)
    _, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    payload = {
        "title": "Set up laptop",
        "description": "Install the toolchain and request VPN access",
        "assigned_to": str(employee.id),
        "due_date": (NOW - timedelta(days=1)).isoformat(),
    }
    r = client.post("/api/tasks", json=payload, headers=auth_headers(admin))
    assert r.status_code == 400

    payload["due_date"] = (NOW + timedelta(days=1)).isoformat()
    payload["assigned_to"] = "00000000-0000-0000-0000-000000000000"
    r = client.post("/api/tasks", json=payload, headers=auth_headers(admin))
    assert r.status_code == 404


def test_progress_derives_status_then_review_completes(db_session):
    admin, user, _, task = _setup(db_session)
    client = TestClient(app)

    r = client.put(f"/api/tasks/{task.id}/progress", json={"progress": 50}, headers=auth_headers(user))
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "in-progress"

    r = client.put(
        f"/api/tasks/{task.id}/progress",
        json={"progress": 100, "message": "All done"},
        headers=auth_headers(user),
    )
    assert r.json()["status"] == "review"
    assert r.json()["completed_date"] is None
    assert r.json()["updates"][0]["message"] == "All done"
    assert r.json()["updates"][0]["progress"] == 100

    r = client.post(
        f"/api/tasks/{task.id}/review",
        json={"feedback": "Nice work", "rating": 5},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "completed"
    assert r.json()["completed_date"] is not None
    assert r.json()["reviews"][0]["rating"] == 5


def test_review_outside_review_state_keeps_status(db_session):
    admin, _, _, task = _setup(db_session)
    client = TestClient(app)
    r = client.post(f"/api/tasks/{task.id}/review", json={"feedback": "Early note"}, headers=auth_headers(admin))
    assert r.json()["status"] == "assigned"
    assert len(r.json()["reviews"]) == 1


def test_derivation_overrides_explicit_status(db_session):
    _, user, _, task = _setup(db_session)
    client = TestClient(app)
    r = client.put(
        f"/api/tasks/{task.id}/progress",
        json={"progress": 100, "status": "in-progress"},
        headers=auth_headers(user),
    )
    assert r.json()["status"] == "review"


def test_overdue_overlay_applies_on_update(db_session, clock):
    _, user, _, task = _setup(db_session)
    clock.advance(timedelta(days=8))
    client = TestClient(app)
    r = client.put(f"/api/tasks/{task.id}/progress", json={"progress": 30}, headers=auth_headers(user))
    assert r.json()["status"] == "overdue"


def test_update_progress_keeps_completed_task_completed(db_session):
    admin, _, _, task = _setup(db_session, status="completed", progress=100)
    update_progress(task, author=admin, now=NOW + timedelta(days=30), progress=100)
    assert task.status == "completed"


def test_progress_only_by_assignee(db_session):
    _, _, _, task = _setup(db_session)
    other, _ = create_account(db_session, "other@example.com")
    client = TestClient(app)
    r = client.put(f"/api/tasks/{task.id}/progress", json={"progress": 10}, headers=auth_headers(other))
    assert r.status_code == 404


def test_progress_bounds_are_validated(db_session):
    _, user, _, task = _setup(db_session)
    client = TestClient(app)
    r = client.put(f"/api/tasks/{task.id}/progress", json={"progress": 150}, headers=auth_headers(user))
    assert r.status_code == 400
    assert r.json()["detail"].startswith("progress")


def test_assignee_cannot_report_overdue(db_session):
    _, user, _, task = _setup(db_session)
    client = TestClient(app)
    r = client.put(f"/api/tasks/{task.id}/progress", json={"status": "overdue"}, headers=auth_headers(user))
    assert r.status_code == 400
    assert r.json()["detail"].startswith("status")
    db_session.refresh(task)
    assert task.status == "assigned"


def test_my_tasks_and_visibility(db_session):
    admin, user, employee, task = _setup(db_session)
    other, _ = create_account(db_session, "other@example.com")
    client = TestClient(app)

    r = client.get("/api/tasks/my-tasks", headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["pagination"]["total"] == 1
    assert r.json()["items"][0]["id"] == str(task.id)

    assert client.get(f"/api/tasks/{task.id}", headers=auth_headers(user)).status_code == 200
    assert client.get(f"/api/tasks/{task.id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/api/tasks/{task.id}", headers=auth_headers(other)).status_code == 404


def test_admin_list_update_stats_and_delete(db_session, clock):
    admin, _, employee, task = _setup(db_session)
    create_task(db_session, assignee=employee, assigner=admin, due_date=NOW - timedelta(days=1), title="Old one")
    client = TestClient(app)
    headers = auth_headers(admin)

    r = client.get(f"/api/tasks?assigned_to={employee.id}", headers=headers)
    assert r.json()["pagination"]["total"] == 2

    r = client.put(f"/api/tasks/{task.id}", json={"priority": "urgent", "notes": "ASAP"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["priority"] == "urgent"

    stats = client.get("/api/tasks/stats/overview", headers=headers).json()
    assert stats["total_tasks"] == 2
    assert stats["overdue_tasks"] == 1
    assert stats["priority_stats"] == {"urgent": 1, "medium": 1}

    assert client.delete(f"/api/tasks/{task.id}", headers=headers).status_code == 200
    assert db_session.query(Task).count() == 1


def test_attachment_upload_download_and_cleanup(db_session, upload_dir):
    admin, user, _, task = _setup(db_session)
    client = TestClient(app)

    r = client.post(
        f"/api/tasks/{task.id}/attachments",
        files={"attachment": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(user),
    )
    assert r.status_code == 200, r.text
    att_id = r.json()["attachment"]["id"]
    stored = list((upload_dir / "tasks").iterdir())
    assert len(stored) == 1

    r = client.get(f"/api/tasks/{task.id}/attachments/{att_id}", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.content == b"hello"

    client.delete(f"/api/tasks/{task.id}", headers=auth_headers(admin))
    assert not stored[0].exists()


def test_attachment_type_is_checked(db_session):
    _, user, _, task = _setup(db_session)
    client = TestClient(app)
    r = client.post(
        f"/api/tasks/{task.id}/attachments",
        files={"attachment": ("run.exe", b"MZ", "application/octet-stream")},
        headers=auth_headers(user),
    )
    assert r.status_code == 400


def test_failed_delete_keeps_attachment_files(db_session, upload_dir, monkeypatch):
    admin, user, _, task = _setup(db_session)
    client = TestClient(app, raise_server_exceptions=False)
    client.post(
        f"/api/tasks/{task.id}/attachments",
        files={"attachment": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(user),
    )
    stored = list((upload_dir / "tasks").iterdir())
    assert len(stored) == 1

    break_commits(monkeypatch, db_session)
    r = client.delete(f"/api/tasks/{task.id}", headers=auth_headers(admin))
    assert r.status_code == 500
    assert stored[0].exists()

    monkeypatch.undo()
    assert db_session.query(Task).count() == 1


def test_failed_attachment_commit_removes_file(db_session, upload_dir, monkeypatch):
    _, user, _, task = _setup(db_session)
    client = TestClient(app, raise_server_exceptions=False)
    break_commits(monkeypatch, db_session)

    r = client.post(
        f"/api/tasks/{task.id}/attachments",
        files={"attachment": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(user),
    )
    assert r.status_code == 500
    assert list((upload_dir / "tasks").iterdir()) == []
