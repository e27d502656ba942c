"""Outgoing email."""

import logging
import smtplib
from email.message import EmailMessage

from natours.config import settings

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when an email cannot be delivered."""

    pass


def send_email(to: str, subject: str, message: str) -> None:
    """Send a plain text email.

    Without ``EMAIL_HOST`` configured the email is logged instead of sent.

    Args:
        to: Recipient address
        subject: Subject line
        message: Plain text body

    Raises:
        EmailError: If the SMTP server rejects or cannot be reached
    """
    if not settings.email_host:
        logger.info(f"Email to {to} not sent (no EMAIL_HOST configured): {subject}\n{message}")
        return

    email = EmailMessage()
    email["From"] = settings.email_from
    email["To"] = to
    email["Subject"] = subject
    email.set_content(message)

    try:
        with smtplib.SMTP(settings.email_host, settings.email_port, timeout=10) as smtp:
            if settings.email_username:
                smtp.starttls()
                smtp.login(settings.email_username, settings.email_password or "")
            smtp.send_message(email)
    except (smtplib.SMTPException, OSError) as e:
        raise EmailError(f"Failed to send email to {to}: {e}") from e

    logger.info(f"Sent email to {to}: {subject}")
