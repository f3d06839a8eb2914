from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from quluub.config import settings

logger = logging.getLogger(__name__)

SENDER_NAME = "Quluub"


def is_email_enabled() -> bool:
    """True when SMTP delivery is switched on and has a server and sender."""
    return bool(
        settings.EMAIL_NOTIFICATIONS_ENABLED
        and settings.SMTP_SERVER
        and settings.EMAIL_FROM
    )


def build_message(
    *,
    to_email: str,
    subject: str,
    body_text: str,
    body_html: Optional[str] = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = f"{SENDER_NAME} <{settings.EMAIL_FROM}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body_text)
    if body_html:
        msg.add_alternative(body_html, subtype="html")
    return msg


def _open_connection() -> smtplib.SMTP:
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(
            settings.SMTP_SERVER,
            settings.SMTP_PORT,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )
    return smtplib.SMTP(
        settings.SMTP_SERVER,
        settings.SMTP_PORT,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
    )


def send_email(
    *,
    to_email: str,
    subject: str,
    body_text: str,
    body_html: Optional[str] = None,
) -> bool:
    """
    Deliver one message over SMTP.

    Returns True on success. Delivery problems are logged and reported as
    False so callers never fail a request because mail is down.
    """
    if not is_email_enabled():
        return False

    msg = build_message(
        to_email=to_email,
        subject=subject,
        body_text=body_text,
        body_html=body_html,
    )
    username = settings.SMTP_USERNAME or settings.EMAIL_FROM
    password = settings.EMAIL_PASSWORD or ""

    try:
        with _open_connection() as server:
            if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
                server.starttls()
            if password:
                server.login(username, password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Email send failed for '%s': %s", to_email, exc)
        return False

    logger.info("Email '%s' sent to %s", subject, to_email)
    return True
