from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from oms.core.leaves import total_days
from oms.main import app
from oms.models.notification import Notification
from tests.helpers import NOW, auth_headers, create_account, create_admin


def _form(start, end, **overrides):
    data = {
        "leave_type": "vacation",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "reason": "Family trip to the coast",
    }
    data.update(overrides)
    return data


def test_total_days_counts_both_endpoints():
    assert total_days(datetime(2024, 1, 1), datetime(2024, 1, 3)) == 3
    # a partial day rounds up
    assert total_days(datetime(2024, 1, 1), datetime(2024, 1, 2, 12)) == 3


def test_submit_notifies_every_admin(db_session):
    create_admin(db_session, "admin1@example.com")
    create_admin(db_session, "admin2@example.com")
    user, employee = create_account(db_session, "emp@example.com", full_name="Jane Doe")
    client = TestClient(app)

    start = NOW + timedelta(days=10)
    r = client.post("/api/leaves/request", data=_form(start, start + timedelta(days=2)), headers=auth_headers(user))
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["total_days"] == 3
    assert body["status"] == "pending"

    notes = db_session.query(Notification).all()
    assert len(notes) == 2
    assert {n.related_model for n in notes} == {"Leave"}
    assert "Jane Doe" in notes[0].message
    assert all(n.recipient_employee_id != employee.id for n in notes)


def test_submit_rejects_bad_ranges(db_session):
    user, _ = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    start = NOW + timedelta(days=10)

    r = client.post("/api/leaves/request", data=_form(start, start), headers=auth_headers(user))
    assert r.status_code == 400

    past = NOW - timedelta(days=1)
    r = client.post("/api/leaves/request", data=_form(past, past + timedelta(days=2)), headers=auth_headers(user))
    assert r.status_code == 400

    r = client.post(
        "/api/leaves/request",
        data=_form(start, start + timedelta(days=1), leave_type="sabbatical"),
        headers=auth_headers(user),
    )
    assert r.status_code == 400
    assert r.json()["detail"].startswith("leave_type")


def test_submit_with_attachment(db_session, upload_dir):
    user, _ = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    start = NOW + timedelta(days=3)
    r = client.post(
        "/api/leaves/request",
        data=_form(start, start + timedelta(days=1), leave_type="sick", reason="Doctor appointment and rest"),
        files=[("attachments", ("note.pdf", b"%PDF-1.4", "application/pdf"))],
        headers=auth_headers(user),
    )
    assert r.status_code == 201, r.text
    assert r.json()["attachments"][0]["file_name"] == "note.pdf"
    assert len(list((upload_dir / "leaves").iterdir())) == 1


def test_review_notifies_with_priority(db_session):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    start = NOW + timedelta(days=5)

    ids = []
    for _ in range(2):
        r = client.post("/api/leaves/request", data=_form(start, start + timedelta(days=1)), headers=auth_headers(user))
        ids.append(r.json()["id"])

    r = client.put(f"/api/leaves/{ids[0]}/review", json={"status": "approved"}, headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["reviewed_by"]["email"] == "admin@example.com"
    r = client.put(
        f"/api/leaves/{ids[1]}/review",
        json={"status": "rejected", "review_comments": "Busy week"},
        headers=auth_headers(admin),
    )
    assert r.json()["review_comments"] == "Busy week"

    mine = (
        db_session.query(Notification)
        .filter(Notification.recipient_employee_id == employee.id)
        .all()
    )
    assert sorted(n.priority for n in mine) == ["high", "medium"]

    r = client.put(f"/api/leaves/{ids[0]}/review", json={"status": "maybe"}, headers=auth_headers(admin))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid status"


def test_lists_and_stats(db_session):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "emp@example.com")
    client = TestClient(app)
    start = NOW + timedelta(days=5)
    client.post("/api/leaves/request", data=_form(start, start + timedelta(days=2)), headers=auth_headers(user))
    client.post(
        "/api/leaves/request",
        data=_form(start, start + timedelta(days=1), leave_type="personal"),
        headers=auth_headers(user),
    )

    mine = client.get("/api/leaves/my-leaves?status=pending", headers=auth_headers(user)).json()
    assert mine["pagination"]["total"] == 2

    everything = client.get(f"/api/leaves/all?employee_id={employee.id}", headers=auth_headers(admin)).json()
    assert len(everything["items"]) == 2

    stats = client.get("/api/leaves/stats", headers=auth_headers(admin)).json()
    assert stats["total_requests"] == 2
    assert stats["status_stats"]["pending"] == {"count": 2, "total_days": 5}
    assert stats["type_stats"] == {"vacation": 1, "personal": 1}

    assert client.get("/api/leaves/stats", headers=auth_headers(user)).status_code == 403
