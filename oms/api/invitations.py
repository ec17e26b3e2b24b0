import logging
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from oms.core.clock import Clock, get_clock
from oms.core.config import settings
from oms.core.invitations import issue_invitation, validate_invitation
from oms.core.mailer import Mailer, get_mailer, invitation_email, send_quietly
from oms.core.rbac import Role, require_roles
from oms.db.session import get_db
from oms.models.invitation import Invitation
from oms.models.user import User
from oms.schemas.common import MessageOut
from oms.schemas.invitation import (
    InvitationCreate,
    InvitationOut,
    InvitationSent,
    InvitationSummary,
    InvitationValidation,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post("/send", response_model=InvitationSent, status_code=201)
def send_invitation(
    payload: InvitationCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    """
    Issue a single-use invitation and email the registration link.

    The invitation is stored before the email goes out; a delivery failure is
    logged and does not undo it.
    """
    ttl_hours = settings.INVITATION_TTL_HOURS
    inv = issue_invitation(
        db=db,
        email=payload.email,
        role=payload.role,
        issuer=current_user,
        now=clock.now(),
        ttl=timedelta(hours=ttl_hours),
    )
    db.commit()

    subject, body = invitation_email(inv.token, ttl_hours)
    send_quietly(mailer, to=inv.email, subject=subject, html_body=body)

    return InvitationSent(
        message="Invitation sent successfully",
        invitation=InvitationSummary(email=inv.email, role=inv.role, expires_at=inv.expires_at),
    )


@router.get("", response_model=list[InvitationOut])
def list_invitations(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    invitations = db.query(Invitation).order_by(Invitation.created_at.desc()).all()
    return [
        InvitationOut(
            id=str(i.id),
            email=i.email,
            role=i.role,
            is_used=i.is_used,
            expires_at=i.expires_at,
            invited_by_email=i.invited_by.email if i.invited_by else None,
            created_at=i.created_at,
        )
        for i in invitations
    ]


@router.get("/validate/{token}", response_model=InvitationValidation)
def validate_token(
    token: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Public: lets the registration page pre-fill email and role."""
    inv = validate_invitation(db, token=token, now=clock.now())
    return InvitationValidation(valid=True, email=inv.email, role=inv.role)


@router.delete("/{invitation_id}", response_model=MessageOut)
def delete_invitation(
    invitation_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    inv = db.get(Invitation, invitation_id)
    if not inv:
        raise HTTPException(status_code=404, detail="Invitation not found")
    db.delete(inv)
    db.commit()
    logger.info("Invitation %s deleted", invitation_id)
    return MessageOut(message="Invitation deleted successfully")
