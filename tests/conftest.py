import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from oms.main import app
from oms.db.base import Base
from oms.db.session import enable_sqlite_savepoints, get_db
from oms.core.clock import FrozenClock, get_clock
from oms.core.config import settings
from oms.core.mailer import Mailer, get_mailer

from tests.helpers import NOW


class RecordingMailer(Mailer):
    """Keeps outgoing mail in memory; set fail=True to simulate a relay outage."""

    def __init__(self):
        super().__init__(sender="no-reply@example.com")
        self.sent: list[dict] = []
        self.fail = False

    def send(self, *, to, subject, html_body, reply_to=None):
        if self.fail:
            raise ConnectionRefusedError("SMTP relay unavailable")
        self.sent.append({"to": to, "subject": subject, "html_body": html_body, "reply_to": reply_to})


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(eng)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FrozenClock(NOW)


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture(autouse=True)
def override_dependencies(db_session, clock, mailer, upload_dir):
    def _get_db_override():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield
    app.dependency_overrides.clear()
