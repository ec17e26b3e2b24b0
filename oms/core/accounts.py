import logging
from dataclasses import dataclass
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from oms.core.invitations import consume_invitation, validate_invitation
from oms.core.onboarding import seed_default_steps
from oms.core.rbac import Role
from oms.core.security import get_password_hash, verify_password
from oms.models.employee import Employee
from oms.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class Registration:
    user: User
    employee: Employee
    invited: bool


def register_account(
    *,
    db: Session,
    email: str,
    password: str,
    full_name: str,
    now: datetime,
    department: str | None = None,
    position: str | None = None,
    token: str | None = None,
) -> Registration:
    """
    Creates account + employee profile + default checklist in one unit of work.
    With a token the invitation must be valid and bound to the same email; it is consumed.
    """
    email = email.strip().lower()

    if db.query(User).filter(User.email == email).one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    role = Role.EMPLOYEE.value
    if token:
        invitation = validate_invitation(db, token=token, now=now)
        if invitation.email != email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email does not match invitation",
            )
        consume_invitation(db, invitation=invitation, now=now)
        role = invitation.role

    user = User(email=email, password_hash=get_password_hash(password), role=role, is_active=True)
    db.add(user)
    db.flush()

    employee = Employee(
        user_id=user.id,
        full_name=full_name.strip(),
        email=email,
        department=department,
        position=position,
        start_date=now,
    )
    db.add(employee)
    db.flush()

    seed_default_steps(db, employee)
    db.flush()

    logger.info("Registered %s (%s)%s", email, role, " via invitation" if token else "")
    return Registration(user=user, employee=employee, invited=bool(token))


def authenticate(db: Session, *, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).one_or_none()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return user


def admin_users(db: Session) -> list[User]:
    return db.query(User).filter(User.role == Role.ADMIN.value, User.is_active.is_(True)).all()


def admin_employees(db: Session) -> list[Employee]:
    return (
        db.query(Employee)
        .join(User, User.id == Employee.user_id)
        .filter(User.role == Role.ADMIN.value)
        .all()
    )
