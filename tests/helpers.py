from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from oms.core.onboarding import seed_default_steps
from oms.core.security import create_access_token, get_password_hash
from oms.models.employee import Employee
from oms.models.task import Task
from oms.models.user import User

PASSWORD = "secret123"
NOW = datetime(2030, 1, 1, 9, 0, 0)


def create_account(
    db: Session,
    email: str,
    *,
    full_name: str = "Test User",
    role: str = "employee",
    department: str | None = "Engineering",
    with_steps: bool = True,
) -> tuple[User, Employee]:
    u = User(email=email, password_hash=get_password_hash(PASSWORD), role=role, is_active=True)
    db.add(u)
    db.flush()
    e = Employee(user_id=u.id, full_name=full_name, email=email, department=department)
    db.add(e)
    db.flush()
    if with_steps:
        seed_default_steps(db, e)
    db.commit()
    db.refresh(u)
    db.refresh(e)
    return u, e


def create_admin(db: Session, email: str = "admin@example.com") -> tuple[User, Employee]:
    return create_account(db, email, full_name="Ada Admin", role="admin", with_steps=False)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def create_task(
    db: Session,
    *,
    assignee: Employee,
    assigner: User,
    due_date: datetime,
    status: str = "assigned",
    progress: int = 0,
    title: str = "Write onboarding notes",
) -> Task:
    t = Task(
        title=title,
        description="Document the first week for the next hire",
        assigned_to_employee_id=assignee.id,
        assigned_by_user_id=assigner.id,
        priority="medium",
        status=status,
        progress=progress,
        due_date=due_date,
        start_date=due_date - timedelta(days=7),
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def break_commits(monkeypatch, db: Session) -> None:
    """Make every later commit on this session fail, as a lost database connection would."""

    def _commit():
        raise RuntimeError("connection lost during commit")

    monkeypatch.setattr(db, "commit", _commit)
