import logging
import secrets
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from oms.models.invitation import Invitation
from oms.models.user import User

logger = logging.getLogger(__name__)

INVALID_INVITATION = "Invalid or expired invitation token"


def _new_token() -> str:
    return secrets.token_hex(32)


def find_active_invitation(db: Session, *, email: str, now: datetime) -> Invitation | None:
    return (
        db.query(Invitation)
        .filter(
            Invitation.email == email,
            Invitation.is_used.is_(False),
            Invitation.expires_at > now,
        )
        .first()
    )


def issue_invitation(
    *,
    db: Session,
    email: str,
    role: str,
    issuer: User,
    now: datetime,
    ttl: timedelta,
) -> Invitation:
    email = email.strip().lower()

    if db.query(User).filter(User.email == email).one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )

    if find_active_invitation(db, email=email, now=now):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An active invitation already exists for this email",
        )

    token = _new_token()
    while db.query(Invitation.id).filter(Invitation.token == token).first():
        token = _new_token()

    inv = Invitation(
        email=email,
        role=role,
        token=token,
        invited_by_user_id=issuer.id,
        is_used=False,
        expires_at=now + ttl,
        created_at=now,
    )
    db.add(inv)
    db.flush()
    logger.info("Invitation %s issued to %s by %s", inv.id, email, issuer.email)
    return inv


def validate_invitation(db: Session, *, token: str, now: datetime) -> Invitation:
    """
    Returns the invitation iff it exists, is unused and unexpired.
    Missing, expired and used tokens are reported identically.
    """
    inv = (
        db.query(Invitation)
        .filter(
            Invitation.token == token,
            Invitation.is_used.is_(False),
            Invitation.expires_at > now,
        )
        .one_or_none()
    )
    if inv is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=INVALID_INVITATION)
    return inv


def consume_invitation(db: Session, *, invitation: Invitation, now: datetime) -> None:
    # Conditional single-row write: only one caller can flip is_used
    result = db.execute(
        update(Invitation)
        .where(
            Invitation.id == invitation.id,
            Invitation.is_used.is_(False),
            Invitation.expires_at > now,
        )
        .values(is_used=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=INVALID_INVITATION)
    invitation.is_used = True
    logger.info("Invitation %s consumed by %s", invitation.id, invitation.email)


def purge_expired_invitations(db: Session, *, now: datetime) -> int:
    result = db.execute(
        delete(Invitation)
        .where(Invitation.expires_at <= now)
        .execution_options(synchronize_session=False)
    )
    count = result.rowcount or 0
    if count:
        logger.info("Purged %d expired invitation(s)", count)
    return count
