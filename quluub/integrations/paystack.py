"""Paystack: NGN checkout, payment verification, bank resolution and transfers."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from quluub.config import settings
from quluub.integrations import ProviderError, request_json

logger = logging.getLogger(__name__)

PROVIDER = "paystack"


def _headers() -> Dict[str, str]:
    if not settings.PAYSTACK_SECRET_KEY:
        raise ProviderError(PROVIDER, "Paystack is not configured")
    return {
        "Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}",
        "Content-Type": "application/json",
    }


def _data(body: Dict[str, Any]) -> Dict[str, Any]:
    """Paystack wraps every payload as {status, message, data}."""
    if not body.get("status"):
        raise ProviderError(PROVIDER, body.get("message") or "Request was not successful")
    return body.get("data") or {}


def initialize_transaction(
    *,
    email: str,
    amount_kobo: int,
    reference: str,
    callback_url: str,
    metadata: Optional[Dict[str, Any]] = None,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    body = request_json(
        PROVIDER,
        "POST",
        f"{settings.PAYSTACK_API_URL}/transaction/initialize",
        headers=_headers(),
        json={
            "email": email,
            "amount": amount_kobo,
            "currency": "NGN",
            "reference": reference,
            "metadata": metadata or {},
            "callback_url": callback_url,
        },
        client=client,
    )
    return _data(body)


def verify_transaction(reference: str, *, client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    body = request_json(
        PROVIDER,
        "GET",
        f"{settings.PAYSTACK_API_URL}/transaction/verify/{reference}",
        headers=_headers(),
        client=client,
    )
    return _data(body)


def resolve_account(
    *,
    account_number: str,
    bank_code: str,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    body = request_json(
        PROVIDER,
        "GET",
        f"{settings.PAYSTACK_API_URL}/bank/resolve",
        headers=_headers(),
        params={"account_number": account_number, "bank_code": bank_code},
        client=client,
    )
    return _data(body)


def create_transfer_recipient(
    *,
    name: str,
    account_number: str,
    bank_code: str,
    client: Optional[httpx.Client] = None,
) -> str:
    body = request_json(
        PROVIDER,
        "POST",
        f"{settings.PAYSTACK_API_URL}/transferrecipient",
        headers=_headers(),
        json={
            "type": "nuban",
            "name": name,
            "account_number": account_number,
            "bank_code": bank_code,
            "currency": "NGN",
        },
        client=client,
    )
    recipient_code = _data(body).get("recipient_code")
    if not recipient_code:
        raise ProviderError(PROVIDER, "No recipient code returned")
    return recipient_code


def initiate_transfer(
    *,
    amount_kobo: int,
    recipient: str,
    reason: str,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    body = request_json(
        PROVIDER,
        "POST",
        f"{settings.PAYSTACK_API_URL}/transfer",
        headers=_headers(),
        json={
            "source": "balance",
            "amount": amount_kobo,
            "recipient": recipient,
            "reason": reason,
        },
        client=client,
    )
    data = _data(body)
    logger.info("Paystack transfer %s initiated (%s)", data.get("transfer_code"), data.get("status"))
    return data
