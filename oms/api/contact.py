
from fastapi import APIRouter, Depends, HTTPException

from oms.core.config import settings
from oms.core.mailer import Mailer, contact_email, get_mailer, send_quietly
from oms.schemas.common import MessageOut
from oms.schemas.contact import ContactRequest


router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=MessageOut)
def contact(payload: ContactRequest, mailer: Mailer = Depends(get_mailer)):
    """Public contact form, relayed by email. Nothing is stored."""
    subject, body = contact_email(payload.name, payload.email, payload.company, payload.message)
    delivered = send_quietly(
        mailer,
        to=settings.CONTACT_RECEIVER_EMAIL or settings.MAIL_FROM,
        subject=subject,
        html_body=body,
        reply_to=payload.email,
    )
    if not delivered:
        raise HTTPException(status_code=500, detail="Failed to send message. Try again later.")
    return MessageOut(message="Message sent successfully!")
