from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import user as user_crud
from quluub.models.notification import Notification
from quluub.utils.email import is_email_enabled, send_email

logger = logging.getLogger(__name__)


EMAIL_SUBJECT_BY_EVENT = {
    "session_booked": "New session booked on Quluub",
    "session_paid": "Your session payment was confirmed on Quluub",
    "session_rescheduled": "A session was rescheduled on Quluub",
    "session_completed": "Session marked completed on Quluub",
    "session_canceled": "Session canceled on Quluub",
    "review_received": "You received a new review on Quluub",
    "request_received": "New connection request on Quluub",
    "request_updated": "Your connection request was answered on Quluub",
    "message_received": "New message on Quluub",
    "complaint_filed": "A new complaint was filed on Quluub",
    "withdrawal_completed": "Your withdrawal was completed on Quluub",
    "withdrawal_failed": "Your withdrawal failed on Quluub",
}


def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(
    db: Session,
    *,
    user_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == user_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    actor_id: Optional[int],
    session_id: Optional[int],
    event_type: str,
    message: str,
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        session_id=session_id,
        event_type=event_type,
        message=message[:500],
    )
    db.add(notification)
    db.flush()
    return notification


def notify_admins(
    db: Session,
    *,
    actor_id: Optional[int],
    event_type: str,
    message: str,
) -> List[Notification]:
    admins = user_crud.list_admins(db)
    return [
        create_notification(
            db,
            recipient_id=admin.id,
            actor_id=actor_id,
            session_id=None,
            event_type=event_type,
            message=message,
        )
        for admin in admins
    ]


def _send_notification_email(to_email: str, subject: str, body_text: str, *, notification_id: Optional[int], recipient_id: Optional[int]) -> None:
    """Send SMTP mail in a background thread so API latency stays low."""
    sent = send_email(
        to_email=to_email,
        subject=subject,
        body_text=body_text,
    )
    if not sent:
        logger.info(
            "Notification email not sent (recipient_id=%s, notification_id=%s)",
            recipient_id,
            notification_id,
        )


def dispatch_email_for_notification(db: Session, notification: Notification) -> bool:
    """
    Best-effort email delivery for a committed notification.
    This function never raises and should not impact request success.
    """
    try:
        if not is_email_enabled():
            return False

        recipient = db.query(models.User).filter(
            models.User.id == notification.recipient_id
        ).first()
        if not recipient or not recipient.email:
            return False

        subject = EMAIL_SUBJECT_BY_EVENT.get(
            notification.event_type,
            "New notification from Quluub",
        )
        recipient_name = (recipient.first_name or "there").strip() or "there"
        body_text = (
            f"Hi {recipient_name},\n\n"
            f"{notification.message}\n\n"
            f"Session ID: {notification.session_id or 'N/A'}\n\n"
            "Open Quluub to view details."
        )

        worker = threading.Thread(
            target=_send_notification_email,
            args=(
                recipient.email,
                subject,
                body_text,
            ),
            kwargs={
                "notification_id": getattr(notification, "id", None),
                "recipient_id": notification.recipient_id,
            },
            daemon=True,
        )
        worker.start()
        return True
    except Exception as exc:
        logger.warning(
            "Notification email dispatch failed (notification_id=%s): %s",
            getattr(notification, "id", None),
            exc,
        )
        return False


def dispatch_emails(db: Session, notifications: Iterable[Optional[Notification]]) -> None:
    for notification in notifications:
        if notification is not None:
            dispatch_email_for_notification(db, notification)
