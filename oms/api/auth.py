from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from oms.core.access import get_employee_for_user
from oms.core.accounts import admin_users, authenticate, register_account
from oms.core.clock import Clock, get_clock
from oms.core.mailer import Mailer, get_mailer, registration_confirmation_email, send_quietly
from oms.core.security import create_access_token, get_current_user
from oms.db.session import get_db
from oms.models.user import User
from oms.schemas.auth import AccountOut, LoginRequest, MeOut, RegisterRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(message: str, user: User) -> TokenResponse:
    return TokenResponse(
        message=message,
        token=create_access_token(user.id),
        user=AccountOut(id=str(user.id), email=user.email, role=user.role),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Create an account and its employee profile.

    With a `token` the invitation must be valid and issued for the same email;
    the invited role is applied and admins are notified by email.
    """
    reg = register_account(
        db=db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        department=payload.department,
        position=payload.position,
        token=payload.token,
        now=clock.now(),
    )
    db.commit()

    if reg.invited:
        subject, body = registration_confirmation_email(reg.user.email, reg.employee.full_name)
        for admin in admin_users(db):
            send_quietly(mailer, to=admin.email, subject=subject, html_body=body)

    return _token_response("User registered successfully", reg.user)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, email=payload.email, password=payload.password)
    return _token_response("Login successful", user)


@router.get("/me", response_model=MeOut)
def me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get current account information including linked employee ID"""
    employee = get_employee_for_user(db, current_user)
    return MeOut(
        id=str(current_user.id),
        email=current_user.email,
        role=current_user.role,
        is_active=current_user.is_active,
        employee_id=str(employee.id) if employee else None,
    )
