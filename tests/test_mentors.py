from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from oms.core.mentorships import assign_mentor
from oms.main import app
from oms.models.mentorship import Mentorship
from oms.models.notification import Notification
from tests.helpers import NOW, auth_headers, create_account, create_admin


def _assign(client, admin, mentor, mentee, **extra):
    body = {"mentor_id": str(mentor.id), "mentee_id": str(mentee.id), **extra}
    return client.post("/api/mentors/assign", json=body, headers=auth_headers(admin))


def test_assign_notifies_both_parties(db_session):
    admin, _ = create_admin(db_session)
    _, mentor = create_account(db_session, "mentor@example.com", full_name="Mia Mentor")
    _, mentee = create_account(db_session, "mentee@example.com", full_name="Max Mentee")
    client = TestClient(app)

    r = _assign(client, admin, mentor, mentee, goals=[{"goal": "Ship first PR"}])
    assert r.status_code == 201, r.text
    assert r.json()["status"] == "active"
    assert r.json()["goals"][0]["goal"] == "Ship first PR"

    recipients = {n.recipient_employee_id for n in db_session.query(Notification).all()}
    assert recipients == {mentor.id, mentee.id}


def test_one_active_mentor_per_mentee(db_session):
    admin, _ = create_admin(db_session)
    _, m1 = create_account(db_session, "m1@example.com")
    _, m2 = create_account(db_session, "m2@example.com")
    _, mentee = create_account(db_session, "mentee@example.com")
    client = TestClient(app)

    assert _assign(client, admin, m1, mentee).status_code == 201
    r = _assign(client, admin, m2, mentee)
    assert r.status_code == 409
    assert r.json()["detail"] == "Mentee already has an active mentor"
    assert db_session.query(Mentorship).filter(Mentorship.status == "active").count() == 1


def test_unique_index_backs_up_the_precheck(db_session, monkeypatch):
    admin, _ = create_admin(db_session)
    _, m1 = create_account(db_session, "m1@example.com")
    _, m2 = create_account(db_session, "m2@example.com")
    _, mentee = create_account(db_session, "mentee@example.com")

    assign_mentor(db=db_session, mentor_id=m1.id, mentee_id=mentee.id, assigner=admin, now=NOW)
    db_session.commit()

    # simulate a concurrent assign that passed the pre-check
    monkeypatch.setattr("oms.core.mentorships.active_mentorship_for_mentee", lambda db, mentee_id: None)
    with pytest.raises(HTTPException) as exc:
        assign_mentor(db=db_session, mentor_id=m2.id, mentee_id=mentee.id, assigner=admin, now=NOW)
    assert exc.value.status_code == 409
    db_session.rollback()
    assert db_session.query(Mentorship).count() == 1


def test_self_pairing_and_missing_people(db_session):
    admin, _ = create_admin(db_session)
    _, e = create_account(db_session, "e@example.com")
    client = TestClient(app)
    assert _assign(client, admin, e, e).status_code == 400

    r = client.post(
        "/api/mentors/assign",
        json={"mentor_id": str(e.id), "mentee_id": "00000000-0000-0000-0000-000000000002"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 404


def test_participants_add_notes_and_toggle_goals(db_session, clock):
    admin, _ = create_admin(db_session)
    mentor_user, mentor = create_account(db_session, "mentor@example.com")
    _, mentee = create_account(db_session, "mentee@example.com")
    outsider, _ = create_account(db_session, "out@example.com")
    client = TestClient(app)
    m = _assign(
        client, admin, mentor, mentee,
        goals=[{"goal": "Learn the deploy flow", "target_date": (NOW + timedelta(days=30)).isoformat()}],
    ).json()

    r = client.post(f"/api/mentors/{m['id']}/notes", json={"note": "Met for coffee"}, headers=auth_headers(mentor_user))
    assert r.status_code == 200
    assert r.json()["notes"][0]["note"] == "Met for coffee"

    r = client.post(f"/api/mentors/{m['id']}/notes", json={"note": "   "}, headers=auth_headers(mentor_user))
    assert r.status_code == 400

    goal_id = m["goals"][0]["id"]
    r = client.put(f"/api/mentors/{m['id']}/goals/{goal_id}", json={"completed": True}, headers=auth_headers(mentor_user))
    assert r.json()["goals"][0]["completed"] is True
    assert r.json()["goals"][0]["completed_at"] is not None

    r = client.post(f"/api/mentors/{m['id']}/notes", json={"note": "Hi"}, headers=auth_headers(outsider))
    assert r.status_code == 404


def test_status_changes_and_reactivation_conflict(db_session):
    admin, _ = create_admin(db_session)
    _, m1 = create_account(db_session, "m1@example.com")
    _, m2 = create_account(db_session, "m2@example.com")
    _, mentee = create_account(db_session, "mentee@example.com")
    client = TestClient(app)
    headers = auth_headers(admin)

    first = _assign(client, admin, m1, mentee).json()
    r = client.put(f"/api/mentors/{first['id']}/status", json={"status": "paused"}, headers=headers)
    assert r.json()["status"] == "paused"

    second = _assign(client, admin, m2, mentee)
    assert second.status_code == 201

    r = client.put(f"/api/mentors/{first['id']}/status", json={"status": "active"}, headers=headers)
    assert r.status_code == 409

    r = client.put(f"/api/mentors/{first['id']}/status", json={"status": "ended"}, headers=headers)
    assert r.status_code == 400

    listed = client.get("/api/mentors/all", headers=headers).json()
    assert [i["id"] for i in listed["items"]] == [second.json()["id"]]
    paused = client.get("/api/mentors/all?status=paused", headers=headers).json()
    assert paused["pagination"]["total"] == 1


def test_notes_need_an_active_mentorship(db_session):
    admin, _ = create_admin(db_session)
    mentor_user, mentor = create_account(db_session, "mentor@example.com")
    _, mentee = create_account(db_session, "mentee@example.com")
    client = TestClient(app)
    m = _assign(client, admin, mentor, mentee).json()
    client.put(f"/api/mentors/{m['id']}/status", json={"status": "completed"}, headers=auth_headers(admin))

    r = client.post(f"/api/mentors/{m['id']}/notes", json={"note": "Late note"}, headers=auth_headers(mentor_user))
    assert r.status_code == 404


def test_my_relationships(db_session):
    admin, _ = create_admin(db_session)
    mentor_user, mentor = create_account(db_session, "mentor@example.com")
    mentee_user, mentee = create_account(db_session, "mentee@example.com")
    client = TestClient(app)
    _assign(client, admin, mentor, mentee)

    as_mentor = client.get("/api/mentors/my-relationships", headers=auth_headers(mentor_user)).json()
    assert len(as_mentor["as_mentor"]) == 1
    assert as_mentor["as_mentee"] is None

    as_mentee = client.get("/api/mentors/my-relationships", headers=auth_headers(mentee_user)).json()
    assert as_mentee["as_mentor"] == []
    assert as_mentee["as_mentee"]["mentor"]["id"] == str(mentor.id)
