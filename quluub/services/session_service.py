# quluub/services/session_service.py
"""
Session Service

Booking and lifecycle rules for counseling sessions. Payment settlement
lives in payment_service; this module never moves money.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from quluub import models
from quluub.config import settings
from quluub.crud import counselor as counselor_crud
from quluub.crud import session as session_crud
from quluub.crud import user as user_crud
from quluub.integrations import ProviderError, whereby
from quluub.models.session import (
    CURRENCIES,
    STATUS_CANCELED,
    STATUS_COMPLETED,
    STATUS_PAID,
    STATUS_PENDING_PAYMENT,
)
from quluub.models.user import ROLE_CLIENT, ROLE_COUNSELOR
from quluub.services import notification_service
from quluub.services.errors import NotFoundError, PermissionDeniedError, ServiceError
from quluub.utils.dates import parse_datetime
from quluub.utils.money import to_money

logger = logging.getLogger(__name__)


# ======================
# HELPER FUNCTIONS
# ======================

def session_price(db: Session, counselor_id: int, currency: str) -> Decimal:
    """Counselor rate in the requested currency, falling back to the platform defaults."""
    profile = counselor_crud.get_profile(db, counselor_id)
    if currency == "ngn":
        rate, default = (profile.ngn_session_rate if profile else None), settings.DEFAULT_NGN_SESSION_RATE
    else:
        rate, default = (profile.session_rate if profile else None), settings.DEFAULT_USD_SESSION_RATE
    return to_money(default if rate is None else rate)


def normalize_currency(currency: Optional[str]) -> str:
    value = (currency or "usd").strip().lower()
    if value not in CURRENCIES:
        raise ServiceError("Currency must be one of: usd, ngn")
    return value


def get_session_for_participant(db: Session, session_id: int, user_id: int) -> models.Session:
    session = session_crud.get_session(db, session_id)
    if not session:
        raise NotFoundError("Session not found")
    if not session_crud.is_participant(session, user_id):
        raise PermissionDeniedError("User not authorized to access this session")
    return session


def counterparty_id(session: models.Session, user_id: int) -> int:
    return session.counselor_id if session.client_id == user_id else session.client_id


def serialize_session(session: models.Session) -> Dict[str, Any]:
    return {
        "id": session.id,
        "client_id": session.client_id,
        "client_name": session.client.name if session.client else None,
        "counselor_id": session.counselor_id,
        "counselor_name": session.counselor.name if session.counselor else None,
        "date": session.date.isoformat() if session.date else None,
        "duration": session.duration,
        "price": session.price,
        "currency": session.currency,
        "status": session.status,
        "is_rated": session.review is not None,
        "notes": session.notes,
        "video_call_url": session.video_call_url,
        "created_at": session.created_at.isoformat() if session.created_at else None,
    }


# ======================
# LISTING
# ======================

def list_sessions_for_user(db: Session, user: models.User) -> List[models.Session]:
    if user.role == ROLE_COUNSELOR:
        return session_crud.list_for_counselor(db, user.id)
    return session_crud.list_for_client(db, user.id)


# ======================
# BOOKING
# ======================

def schedule_session(
    db: Session,
    user: models.User,
    *,
    date: Any,
    counselor_id: Optional[int] = None,
    client_id: Optional[int] = None,
    currency: Optional[str] = None,
    duration: int = 60,
    notes: Optional[str] = None,
) -> models.Session:
    """
    Book a session in ``pending_payment``.

    A client books with a counselor; a counselor books on behalf of a client.

    Raises:
        ServiceError: Missing counterpart or invalid date/currency
        PermissionDeniedError: Caller role cannot book
        NotFoundError: Counterpart does not exist
    """
    if user.role == ROLE_CLIENT:
        if not counselor_id:
            raise ServiceError("Counselor ID is required.")
        client_id = user.id
        if not user_crud.get_counselor_user(db, counselor_id):
            raise NotFoundError("Counselor not found.")
    elif user.role == ROLE_COUNSELOR:
        if not client_id:
            raise ServiceError("Client ID is required.")
        counselor_id = user.id
        client = user_crud.get_user(db, client_id)
        if not client or client.role != ROLE_CLIENT:
            raise NotFoundError("Client user not found.")
    else:
        raise PermissionDeniedError("User role is not authorized to schedule sessions.")

    try:
        start = parse_datetime(date)
    except ValueError:
        raise ServiceError("Invalid date")
    if start is None:
        raise ServiceError("Date is required")

    currency = normalize_currency(currency)
    session = session_crud.create_session(
        db,
        client_id=client_id,
        counselor_id=counselor_id,
        date=start,
        price=session_price(db, counselor_id, currency),
        currency=currency,
        duration=duration,
        notes=notes,
    )
    notification = notification_service.create_notification(
        db,
        recipient_id=counterparty_id(session, user.id),
        actor_id=user.id,
        session_id=session.id,
        event_type="session_booked",
        message=f"{user.name} booked a session for {start.strftime('%Y-%m-%d %H:%M')} UTC.",
    )
    db.commit()
    db.refresh(session)

    notification_service.dispatch_email_for_notification(db, notification)
    logger.info("Session %s booked by user %s", session.id, user.id)
    return session


# ======================
# LIFECYCLE
# ======================

def reschedule_session(
    db: Session,
    user: models.User,
    session_id: int,
    date: Any,
    video_client: Optional[httpx.Client] = None
) -> models.Session:
    """
    Move a session. A paid session gets a fresh video room for the new
    window; if the room cannot be created the link stays empty.
    """
    if not date:
        raise ServiceError("Date is required")
    try:
        new_date = parse_datetime(date)
    except ValueError:
        raise ServiceError("Invalid date")

    session = get_session_for_participant(db, session_id, user.id)
    if session.status in (STATUS_COMPLETED, STATUS_CANCELED):
        raise ServiceError(f"A {session.status} session cannot be rescheduled")

    session.date = new_date
    if session.status == STATUS_PAID:
        session.video_call_url = None
        try:
            session.video_call_url = whereby.create_session_room(session, client=video_client)
        except ProviderError as exc:
            logger.warning("Video room for rescheduled session %s not created: %s", session.id, exc)

    notification = notification_service.create_notification(
        db,
        recipient_id=counterparty_id(session, user.id),
        actor_id=user.id,
        session_id=session.id,
        event_type="session_rescheduled",
        message=f"{user.name} moved your session to {new_date.strftime('%Y-%m-%d %H:%M')} UTC.",
    )
    db.commit()
    db.refresh(session)

    notification_service.dispatch_email_for_notification(db, notification)
    return session


def complete_session(db: Session, user: models.User, session_id: int) -> models.Session:
    """The counselor was credited at settlement; completion only changes status."""
    session = get_session_for_participant(db, session_id, user.id)
    if session.status == STATUS_COMPLETED:
        raise ServiceError("Session already completed")
    if session.status != STATUS_PAID:
        raise ServiceError("Session has not been paid for")

    session.status = STATUS_COMPLETED
    notification = notification_service.create_notification(
        db,
        recipient_id=counterparty_id(session, user.id),
        actor_id=user.id,
        session_id=session.id,
        event_type="session_completed",
        message="Your session was marked as completed.",
    )
    db.commit()
    db.refresh(session)

    notification_service.dispatch_email_for_notification(db, notification)
    logger.info("Session %s completed by user %s", session.id, user.id)
    return session


def cancel_session(db: Session, user: models.User, session_id: int) -> models.Session:
    session = get_session_for_participant(db, session_id, user.id)
    if session.status != STATUS_PENDING_PAYMENT:
        raise ServiceError("Only sessions awaiting payment can be canceled")

    session.status = STATUS_CANCELED
    notification = notification_service.create_notification(
        db,
        recipient_id=counterparty_id(session, user.id),
        actor_id=user.id,
        session_id=session.id,
        event_type="session_canceled",
        message=f"{user.name} canceled a session.",
    )
    db.commit()
    db.refresh(session)

    notification_service.dispatch_email_for_notification(db, notification)
    return session
