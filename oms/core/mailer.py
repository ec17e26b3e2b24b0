import html
import logging
import smtplib
from email.message import EmailMessage

from oms.core.config import settings

logger = logging.getLogger(__name__)


class Mailer:
    """Sends HTML email through the configured SMTP relay."""

    def __init__(
        self,
        host: str = "",
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender

    def send(self, *, to: str, subject: str, html_body: str, reply_to: str | None = None) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html_body, subtype="html")

        if not self.host:
            logger.info("SMTP not configured, dropping mail to %s: %s", to, subject)
            return

        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)
        logger.info("Mail sent to %s: %s", to, subject)


_mailer = Mailer(
    host=settings.SMTP_HOST,
    port=settings.SMTP_PORT,
    username=settings.SMTP_USERNAME,
    password=settings.SMTP_PASSWORD,
    use_tls=settings.SMTP_USE_TLS,
    sender=settings.MAIL_FROM,
)


def get_mailer() -> Mailer:
    return _mailer


def send_quietly(mailer: Mailer, **kwargs) -> bool:
    """Fire-and-forget send; failures are logged and never propagate."""
    try:
        mailer.send(**kwargs)
        return True
    except Exception:
        logger.exception("Failed to send mail to %s", kwargs.get("to"))
        return False


# --- Templates ---

def invitation_email(token: str, ttl_hours: int) -> tuple[str, str]:
    link = f"{settings.FRONTEND_URL}/register?token={token}"
    subject = "Welcome to Onboarding Management System - Complete Your Registration"
    body = f"""
<html>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h1>Welcome to Onboarding Management System (OMS)!</h1>
    <p>You've been invited to join our onboarding management system.</p>
    <p>Click the link below to complete your registration and get started:</p>
    <p><a href="{html.escape(link)}">Complete Registration</a></p>
    <p><strong>Important:</strong> This invitation link will expire in {ttl_hours} hours.</p>
    <p>If you have any questions, please contact your administrator.</p>
  </body>
</html>
"""
    return subject, body


def registration_confirmation_email(email: str, full_name: str) -> tuple[str, str]:
    subject = "New Employee Registration Completed"
    body = f"""
<h3>Registration Notification</h3>
<p><strong>{html.escape(full_name)}</strong> has successfully completed their registration.</p>
<p>Email: {html.escape(email)}</p>
<p>You can now manage their onboarding process in the admin panel.</p>
"""
    return subject, body


def contact_email(name: str, email: str, company: str | None, message: str) -> tuple[str, str]:
    subject = f"Contact from {name} ({company or 'No Company'})"
    body = f"""
<h2>New Contact Form Submission</h2>
<p><strong>Name:</strong> {html.escape(name)}</p>
<p><strong>Email:</strong> <a href="mailto:{html.escape(email)}">{html.escape(email)}</a></p>
<p><strong>Company:</strong> {html.escape(company or 'N/A')}</p>
<p><strong>Message:</strong></p>
<p style="white-space:pre-line;">{html.escape(message)}</p>
<hr />
<p style="font-size: 12px;">You received this from the OMS Contact Form.</p>
"""
    return subject, body
