# quluub/services/payment_service.py
"""
Payment Service

Checkout creation for Stripe (USD) and Paystack (NGN), and settlement:
the single place where a session becomes paid and the counselor is credited.
Webhooks and client-side verification both end up in ``mark_session_paid``.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from quluub import models
from quluub.config import settings
from quluub.crud import session as session_crud
from quluub.crud import user as user_crud
from quluub.crud import wallet as wallet_crud
from quluub.integrations import ProviderError, paystack, stripe_client, whereby
from quluub.models.request import REQUEST_ACCEPTED, REQUEST_PENDING
from quluub.models.session import (
    STATUS_CANCELED,
    STATUS_COMPLETED,
    STATUS_PAID,
)
from quluub.services import notification_service, session_service, wallet_service
from quluub.services.errors import ConflictError, NotFoundError, PermissionDeniedError, ServiceError
from quluub.utils.dates import parse_datetime, utcnow
from quluub.utils.money import format_currency, net_of_fee, to_minor_units

logger = logging.getLogger(__name__)


def settlement_reference(session_id: int) -> str:
    """Ledger reference for the counselor credit; unique per session."""
    return f"session-{session_id}"


# =====================================
# CHECKOUT
# =====================================

def create_checkout(
    db: Session,
    client_user: models.User,
    counselor_id: int,
    currency: Optional[str],
    date: Optional[str] = None,
    time: Optional[str] = None,
    client: Optional[httpx.Client] = None
) -> Dict[str, Any]:
    """
    Create a ``pending_payment`` session and open a provider checkout for it.

    The session is committed before the provider call; if the provider
    fails the session is canceled and ProviderError propagates.

    Returns:
        Dictionary with provider, checkout url and the internal session id

    Raises:
        NotFoundError: Counselor does not exist
        ServiceError: Unsupported currency or bad date
        ProviderError: Stripe or Paystack rejected the request
    """
    counselor = user_crud.get_counselor_user(db, counselor_id)
    if not counselor:
        raise NotFoundError("Counselor not found")

    currency = (currency or "").strip().lower()
    if currency not in ("usd", "ngn"):
        raise ServiceError("Unsupported currency")

    if date and time:
        try:
            start = parse_datetime(f"{date}T{time}")
        except ValueError:
            raise ServiceError("Invalid date or time")
    else:
        start = utcnow().replace(microsecond=0)

    session = session_crud.create_session(
        db,
        client_id=client_user.id,
        counselor_id=counselor.id,
        date=start,
        price=session_service.session_price(db, counselor.id, currency),
        currency=currency,
    )
    db.commit()
    db.refresh(session)

    try:
        if currency == "usd":
            checkout = stripe_client.create_checkout_session(
                customer_email=client_user.email,
                product_name=f"Counseling session with {counselor.name}",
                description=f"Booking for {start.strftime('%Y-%m-%d')} at {start.strftime('%H:%M')}",
                unit_amount_cents=to_minor_units(session.price),
                internal_session_id=session.id,
                success_url=f"{settings.CLIENT_URL}/booking/success?session_id={session.id}",
                cancel_url=f"{settings.CLIENT_URL}/booking/cancel",
                client=client
            )
            session.stripe_checkout_session_id = checkout.get("id")
            db.commit()
            result = {"provider": "stripe", "id": checkout.get("id"), "url": checkout.get("url")}
        else:
            reference = str(session.id)
            session.payment_reference = reference
            db.commit()
            data = paystack.initialize_transaction(
                email=client_user.email,
                amount_kobo=to_minor_units(session.price),
                reference=reference,
                metadata={"internalSessionId": str(session.id)},
                callback_url=(
                    f"{settings.CLIENT_URL}/payment/verify?provider=paystack"
                    f"&counselor_id={counselor.id}&session_id={reference}"
                ),
                client=client
            )
            result = {
                "provider": "paystack",
                "reference": data.get("reference", reference),
                "access_code": data.get("access_code"),
                "url": data.get("authorization_url"),
            }
    except ProviderError:
        session.status = STATUS_CANCELED
        db.commit()
        raise

    result["session_id"] = session.id
    logger.info("Checkout opened for session %s via %s", session.id, result["provider"])
    return result


# =====================================
# SETTLEMENT
# =====================================

def _ensure_connection_request(db: Session, client_id: int, counselor_id: int) -> Optional[models.ConnectionRequest]:
    existing = db.query(models.ConnectionRequest).filter(
        models.ConnectionRequest.client_id == client_id,
        models.ConnectionRequest.counselor_id == counselor_id,
        models.ConnectionRequest.status.in_([REQUEST_PENDING, REQUEST_ACCEPTED])
    ).first()
    if existing:
        return None

    request = models.ConnectionRequest(
        client_id=client_id,
        counselor_id=counselor_id,
        status=REQUEST_PENDING
    )
    db.add(request)
    db.flush()
    return request


def mark_session_paid(
    db: Session,
    session: models.Session,
    payment_intent_id: Optional[str] = None,
    video_client: Optional[httpx.Client] = None,
    payment_reference: Optional[str] = None
) -> bool:
    """
    Settle a session. Idempotent: a session that is already paid or
    completed, or whose settlement credit exists, is left alone.

    Steps: mark paid, record the Paystack reference when the session has
    none, open the video room (failure is logged only), make sure a
    connection request exists, credit the counselor net of the platform
    fee, notify both parties.

    Returns:
        True if this call settled the session, False if it was already settled
    """
    if session.status in (STATUS_PAID, STATUS_COMPLETED):
        logger.info("Session %s already settled", session.id)
        return False

    reference = settlement_reference(session.id)
    if wallet_crud.get_transaction_by_reference(db, reference):
        logger.info("Session %s already credited", session.id)
        return False

    if session.status == STATUS_CANCELED:
        logger.warning("Payment received for canceled session %s; settling anyway", session.id)

    session.status = STATUS_PAID
    if payment_intent_id:
        session.payment_intent_id = payment_intent_id
    # Spends the Paystack reference so it cannot be deposited later
    if payment_reference and not session.payment_reference:
        session.payment_reference = payment_reference

    if not session.video_call_url:
        try:
            session.video_call_url = whereby.create_session_room(session, client=video_client)
        except ProviderError as exc:
            logger.warning("Video room for session %s not created: %s", session.id, exc)

    _ensure_connection_request(db, session.client_id, session.counselor_id)

    amount_earned = net_of_fee(session.price, settings.PLATFORM_FEE)
    wallet = wallet_service.get_or_create_wallet(db, session.counselor_id)
    wallet_service.credit_wallet(
        db,
        wallet,
        amount_earned,
        description="Session payment",
        reference=reference,
        session_id=session.id
    )

    price_text = format_currency(session.price, session.currency)
    notifications = [
        notification_service.create_notification(
            db,
            recipient_id=session.client_id,
            actor_id=session.counselor_id,
            session_id=session.id,
            event_type="session_paid",
            message=f"Your payment of {price_text} was received. Your session is confirmed."
        ),
        notification_service.create_notification(
            db,
            recipient_id=session.counselor_id,
            actor_id=session.client_id,
            session_id=session.id,
            event_type="session_paid",
            message=(
                f"A client paid {price_text} for a session. "
                f"{format_currency(amount_earned, session.currency)} was added to your wallet."
            )
        ),
    ]
    db.commit()

    notification_service.dispatch_emails(db, notifications)
    logger.info("Session %s settled, counselor %s credited %s", session.id, session.counselor_id, amount_earned)
    return True


# =====================================
# PROVIDER EVENTS
# =====================================

def _find_session(db: Session, internal_session_id: Any) -> Optional[models.Session]:
    try:
        return session_crud.get_session(db, int(internal_session_id))
    except (TypeError, ValueError):
        return None


def handle_stripe_event(db: Session, event: Dict[str, Any], video_client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    """Process a verified Stripe webhook event."""
    event_type = event.get("type")
    if event_type != "checkout.session.completed":
        logger.debug("Ignoring Stripe event %s", event_type)
        return {"received": True}

    checkout = (event.get("data") or {}).get("object") or {}
    metadata = checkout.get("metadata") or {}
    session = _find_session(db, metadata.get("internalSessionId"))
    if session is None and checkout.get("id"):
        session = session_crud.get_by_checkout_id(db, checkout["id"])

    if session is None:
        logger.error("Stripe webhook: no session for checkout %s", checkout.get("id"))
        return {"received": True}

    if checkout.get("payment_status", "paid") == "paid":
        mark_session_paid(db, session, payment_intent_id=checkout.get("payment_intent"), video_client=video_client)
    return {"received": True}


def _paystack_amount_matches(session: models.Session, data: Dict[str, Any]) -> bool:
    if int(data.get("amount") or 0) == to_minor_units(session.price):
        return True
    logger.error(
        "Paystack amount %s does not match session %s price %s",
        data.get("amount"), session.id, session.price
    )
    return False


def _paystack_reference_available(db: Session, session: models.Session, reference: str) -> bool:
    """
    A Paystack reference pays for one thing only: the session it was issued
    for, and never a wallet deposit.
    """
    if session.payment_reference and session.payment_reference != reference:
        logger.error(
            "Paystack reference %s does not belong to session %s (expected %s)",
            reference, session.id, session.payment_reference
        )
        return False
    if wallet_crud.get_transaction_by_reference(db, reference):
        logger.error("Paystack reference %s was already credited as a deposit", reference)
        return False
    return True


def _find_paystack_session(db: Session, reference: Optional[str], data: Dict[str, Any]) -> Optional[models.Session]:
    session = db.query(models.Session).filter(
        models.Session.payment_reference == reference
    ).first() if reference else None
    if session is None:
        session = _find_session(db, (data.get("metadata") or {}).get("internalSessionId"))
    return session


def handle_paystack_charge(db: Session, data: Dict[str, Any], video_client: Optional[httpx.Client] = None) -> None:
    reference = data.get("reference")
    session = _find_paystack_session(db, reference, data)
    if session is None:
        logger.error("Paystack webhook: session not found for reference %s", reference)
        return

    if not reference or not _paystack_reference_available(db, session, reference):
        return
    if _paystack_amount_matches(session, data):
        mark_session_paid(db, session, video_client=video_client, payment_reference=reference)


# =====================================
# CLIENT-SIDE VERIFICATION
# =====================================

def verify_stripe_payment(
    db: Session,
    user: models.User,
    checkout_session_id: Optional[str],
    client: Optional[httpx.Client] = None
) -> Dict[str, Any]:
    if not checkout_session_id:
        raise ServiceError("Session ID is required")

    checkout = stripe_client.retrieve_checkout_session(checkout_session_id, client=client)
    payment_status = checkout.get("payment_status")

    session = _find_session(db, (checkout.get("metadata") or {}).get("internalSessionId"))
    if session is None:
        session = session_crud.get_by_checkout_id(db, checkout_session_id)
    if session is None:
        raise NotFoundError("Session not found")
    if not session_crud.is_participant(session, user.id):
        raise PermissionDeniedError("User not authorized to verify this payment")

    if payment_status == "paid":
        mark_session_paid(db, session, payment_intent_id=checkout.get("payment_intent"))

    return {"payment_status": payment_status, "session_id": session.id}


def verify_paystack_payment(
    db: Session,
    user: models.User,
    reference: Optional[str],
    client: Optional[httpx.Client] = None
) -> Dict[str, Any]:
    if not reference:
        raise ServiceError("Paystack reference is required")

    data = paystack.verify_transaction(reference, client=client)
    payment_status = data.get("status")

    session = _find_paystack_session(db, reference, data)
    if session is None:
        raise NotFoundError("Session not found")
    if not session_crud.is_participant(session, user.id):
        raise PermissionDeniedError("User not authorized to verify this payment")
    if not _paystack_reference_available(db, session, reference):
        raise ConflictError("Transaction already processed")

    if payment_status == "success" and _paystack_amount_matches(session, data):
        mark_session_paid(db, session, payment_reference=reference)

    return {"payment_status": payment_status, "session_id": session.id}
