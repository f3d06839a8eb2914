"""
Webhook signature verification for Stripe and Paystack.

Both schemes are HMACs over the raw request body and are compared in
constant time.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)

# Maximum age of a Stripe webhook in seconds
STRIPE_TOLERANCE_SECONDS = 300


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails"""


def constant_time_compare(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_paystack_signature(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).hexdigest()


def verify_paystack_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> None:
    """x-paystack-signature is HMAC-SHA512(secret, raw body), hex encoded."""
    if not secret:
        raise WebhookSignatureError("Paystack secret is not configured")
    expected = compute_paystack_signature(secret, payload)
    if not constant_time_compare(expected, signature or ""):
        logger.warning("Rejected Paystack webhook with invalid signature")
        raise WebhookSignatureError("Invalid signature")


def compute_stripe_signature(secret: str, timestamp: str, payload: bytes) -> str:
    signed_payload = timestamp.encode("utf-8") + b"." + payload
    return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()


def verify_stripe_signature(
    payload: bytes,
    header: Optional[str],
    secret: Optional[str],
    *,
    tolerance: int = STRIPE_TOLERANCE_SECONDS,
    now: Optional[int] = None,
) -> None:
    """
    Stripe-Signature looks like ``t=1700000000,v1=<hex>,v1=<hex>``; any v1
    entry matching HMAC-SHA256(secret, "<t>.<body>") is accepted.
    """
    if not secret:
        raise WebhookSignatureError("Stripe webhook secret is not configured")
    if not header:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    timestamp = None
    signatures = []
    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)

    if not timestamp or not signatures:
        raise WebhookSignatureError("Malformed Stripe-Signature header")

    try:
        age = abs((now if now is not None else int(time.time())) - int(timestamp))
    except ValueError:
        raise WebhookSignatureError("Invalid timestamp")
    if age > tolerance:
        logger.warning("Rejected Stripe webhook older than %ss", tolerance)
        raise WebhookSignatureError("Timestamp outside the tolerance zone")

    expected = compute_stripe_signature(secret, timestamp, payload)
    if not any(constant_time_compare(expected, sig) for sig in signatures):
        logger.warning("Rejected Stripe webhook with invalid signature")
        raise WebhookSignatureError("No signatures found matching the expected signature")
