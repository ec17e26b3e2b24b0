from fastapi.testclient import TestClient

from oms.core.broadcasts import preview
from oms.main import app
from oms.models.broadcast import Broadcast
from oms.models.notification import Notification
from tests.helpers import auth_headers, create_account, create_admin


def _send(client, admin, recipients, **overrides):
    data = {
        "title": "Office closed",
        "message": "The office is closed on Friday for maintenance.",
        "recipients": [str(r.id) for r in recipients],
        "broadcast_type": "announcement",
    }
    data.update(overrides)
    return client.post("/api/broadcasts/send", data=data, headers=auth_headers(admin))


def test_fan_out_creates_one_broadcast_and_n_notifications(db_session):
    admin, _ = create_admin(db_session)
    recipients = [create_account(db_session, f"e{i}@example.com")[1] for i in range(3)]
    client = TestClient(app)

    r = _send(client, admin, recipients)
    assert r.status_code == 201, r.text
    broadcast_id = r.json()["id"]
    assert len(r.json()["recipients"]) == 3

    assert db_session.query(Broadcast).count() == 1
    notes = db_session.query(Notification).all()
    assert len(notes) == 3
    assert {str(n.related_id) for n in notes} == {broadcast_id}
    assert {n.related_model for n in notes} == {"Broadcast"}
    assert notes[0].title == "New announcement: Office closed"


def test_unknown_recipient_fails_everything(db_session):
    admin, _ = create_admin(db_session)
    _, e = create_account(db_session, "e@example.com")
    client = TestClient(app)
    r = client.post(
        "/api/broadcasts/send",
        data={
            "title": "Office closed",
            "message": "The office is closed on Friday for maintenance.",
            "recipients": [str(e.id), "00000000-0000-0000-0000-000000000003"],
        },
        headers=auth_headers(admin),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Some recipients not found"
    assert db_session.query(Broadcast).count() == 0
    assert db_session.query(Notification).count() == 0


def test_notification_body_is_truncated():
    assert preview("x" * 100) == "x" * 100
    assert preview("y" * 101) == "y" * 100 + "..."


def test_listing_marks_read_as_side_effect(db_session):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "e@example.com")
    client = TestClient(app)
    _send(client, admin, [employee])
    _send(client, admin, [employee], title="Second notice")

    unread = client.get("/api/broadcasts/my-broadcasts?unread_only=true", headers=auth_headers(user)).json()
    assert unread["pagination"]["total"] == 2

    first = client.get("/api/broadcasts/my-broadcasts", headers=auth_headers(user)).json()
    assert first["pagination"]["total"] == 2
    # items still show the state from before this fetch
    assert [i["is_read"] for i in first["items"]] == [False, False]

    unread = client.get("/api/broadcasts/my-broadcasts?unread_only=true", headers=auth_headers(user)).json()
    assert unread["items"] == []
    again = client.get("/api/broadcasts/my-broadcasts", headers=auth_headers(user)).json()
    assert all(i["is_read"] and i["read_at"] for i in again["items"])


def test_unread_only_fetch_does_not_mark(db_session):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "e@example.com")
    client = TestClient(app)
    _send(client, admin, [employee])
    client.get("/api/broadcasts/my-broadcasts?unread_only=true", headers=auth_headers(user))
    unread = client.get("/api/broadcasts/my-broadcasts?unread_only=true", headers=auth_headers(user)).json()
    assert unread["pagination"]["total"] == 1


def test_attachments_and_access(db_session, upload_dir):
    admin, _ = create_admin(db_session)
    user, employee = create_account(db_session, "e@example.com")
    outsider, _ = create_account(db_session, "out@example.com")
    client = TestClient(app)

    r = client.post(
        "/api/broadcasts/send",
        data={
            "title": "Handbook",
            "message": "Please read the attached handbook this week.",
            "recipients": [str(employee.id)],
        },
        files=[("attachments", ("handbook.pdf", b"%PDF-1.4 handbook", "application/pdf"))],
        headers=auth_headers(admin),
    )
    assert r.status_code == 201, r.text
    b = r.json()
    url = f"/api/broadcasts/{b['id']}/attachments/{b['attachments'][0]['id']}"

    assert client.get(url, headers=auth_headers(user)).content == b"%PDF-1.4 handbook"
    assert client.get(url, headers=auth_headers(admin)).status_code == 200
    assert client.get(url, headers=auth_headers(outsider)).status_code == 403


def test_admin_list_and_stats(db_session):
    admin, _ = create_admin(db_session)
    user, e1 = create_account(db_session, "e1@example.com")
    _, e2 = create_account(db_session, "e2@example.com")
    client = TestClient(app)
    _send(client, admin, [e1, e2], priority="high")
    _send(client, admin, [e1], broadcast_type="policy")
    client.get("/api/broadcasts/my-broadcasts", headers=auth_headers(user))

    listed = client.get("/api/broadcasts/all?broadcast_type=policy", headers=auth_headers(admin)).json()
    assert listed["pagination"]["total"] == 1

    stats = client.get("/api/broadcasts/stats", headers=auth_headers(admin)).json()
    assert stats["total_broadcasts"] == 2
    assert stats["type_stats"] == {"announcement": 1, "policy": 1}
    assert stats["priority_stats"] == {"high": 1, "medium": 1}
    assert stats["read_stats"] == {"read": 2, "unread": 1}

    assert client.get("/api/broadcasts/stats", headers=auth_headers(user)).status_code == 403
