# quluub/api/payment.py
"""
Payment endpoints: checkout creation, provider webhooks and client-side
payment verification.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from quluub import models
from quluub.api.errors import service_errors
from quluub.config import settings
from quluub.database import get_db
from quluub.integrations.webhooks import (
    WebhookSignatureError,
    verify_paystack_signature,
    verify_stripe_signature,
)
from quluub.schemas.payment import CheckoutRequest, PaystackVerifyRequest, StripeVerifyRequest
from quluub.services import payment_service, payout_service
from quluub.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["Payment"])

TRANSFER_EVENTS = ("transfer.success", "transfer.failed", "transfer.reversed")


def _parse_event(payload: bytes) -> dict:
    try:
        return json.loads(payload)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")


# ======================
# CHECKOUT
# ======================
@router.post("/create-checkout-session")
def create_checkout_session(
    payload: CheckoutRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return payment_service.create_checkout(
            db,
            current_user,
            counselor_id=payload.counselor_id,
            currency=payload.currency,
            date=payload.date,
            time=payload.time
        )


# ======================
# WEBHOOKS
# ======================
@router.post("/stripe/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    payload = await request.body()
    try:
        verify_stripe_signature(
            payload,
            request.headers.get("stripe-signature"),
            settings.STRIPE_WEBHOOK_SECRET,
        )
    except WebhookSignatureError as e:
        logger.warning("Stripe webhook rejected: %s", e)
        raise HTTPException(status_code=400, detail=f"Webhook Error: {e}")

    return payment_service.handle_stripe_event(db, _parse_event(payload))


@router.post("/paystack/webhook")
async def paystack_webhook(request: Request, db: Session = Depends(get_db)):
    payload = await request.body()
    try:
        verify_paystack_signature(
            payload,
            request.headers.get("x-paystack-signature"),
            settings.PAYSTACK_SECRET_KEY,
        )
    except WebhookSignatureError as e:
        logger.warning("Paystack webhook rejected: %s", e)
        raise HTTPException(status_code=401, detail="Invalid signature")

    event = _parse_event(payload)
    event_type = event.get("event")
    data = event.get("data") or {}
    logger.info("Paystack webhook received: %s", event_type)

    if event_type == "charge.success":
        payment_service.handle_paystack_charge(db, data)
    elif event_type in TRANSFER_EVENTS:
        payout_service.handle_transfer_event(db, event_type, data)

    return {"received": True}


# ======================
# CLIENT VERIFICATION
# ======================
@router.post("/verify-payment")
def verify_payment(
    payload: StripeVerifyRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return payment_service.verify_stripe_payment(db, current_user, payload.session_id)


@router.post("/verify-paystack")
def verify_paystack(
    payload: PaystackVerifyRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return payment_service.verify_paystack_payment(db, current_user, payload.reference)
