from fastapi.testclient import TestClient

from oms.core.config import settings
from oms.main import app

FORM = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "company": "Acme",
    "message": "We would like a demo of the onboarding flow.",
}


def test_contact_form_is_relayed(mailer, monkeypatch):
    monkeypatch.setattr(settings, "CONTACT_RECEIVER_EMAIL", "sales@example.com")
    client = TestClient(app)

    r = client.post("/api/contact", json=FORM)
    assert r.status_code == 200
    assert r.json() == {"message": "Message sent successfully!"}

    [mail] = mailer.sent
    assert mail["to"] == "sales@example.com"
    assert mail["reply_to"] == "jane@example.com"
    assert mail["subject"] == "Contact from Jane Doe (Acme)"


def test_contact_falls_back_to_sender_address(mailer, monkeypatch):
    monkeypatch.setattr(settings, "CONTACT_RECEIVER_EMAIL", "")
    client = TestClient(app)
    client.post("/api/contact", json={**FORM, "company": None})
    assert mailer.sent[0]["to"] == settings.MAIL_FROM
    assert mailer.sent[0]["subject"] == "Contact from Jane Doe (No Company)"


def test_contact_mail_failure(mailer):
    mailer.fail = True
    client = TestClient(app)
    r = client.post("/api/contact", json=FORM)
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to send message. Try again later."


def test_contact_validation():
    client = TestClient(app)
    r = client.post("/api/contact", json={**FORM, "message": "too short"})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("message:")
