"""Stripe Checkout over the REST API (form-encoded requests)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from quluub.config import settings
from quluub.integrations import ProviderError, request_json

PROVIDER = "stripe"


def _headers() -> Dict[str, str]:
    if not settings.STRIPE_SECRET_KEY:
        raise ProviderError(PROVIDER, "Stripe is not configured")
    return {"Authorization": f"Bearer {settings.STRIPE_SECRET_KEY}"}


def create_checkout_session(
    *,
    customer_email: str,
    product_name: str,
    description: str,
    unit_amount_cents: int,
    internal_session_id: int,
    success_url: str,
    cancel_url: str,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    form = {
        "mode": "payment",
        "payment_method_types[0]": "card",
        "customer_email": customer_email,
        "client_reference_id": str(internal_session_id),
        "line_items[0][quantity]": "1",
        "line_items[0][price_data][currency]": "usd",
        "line_items[0][price_data][unit_amount]": str(unit_amount_cents),
        "line_items[0][price_data][product_data][name]": product_name,
        "line_items[0][price_data][product_data][description]": description,
        "metadata[internalSessionId]": str(internal_session_id),
        "success_url": success_url,
        "cancel_url": cancel_url,
    }
    return request_json(
        PROVIDER,
        "POST",
        f"{settings.STRIPE_API_URL}/checkout/sessions",
        headers=_headers(),
        data=form,
        client=client,
    )


def retrieve_checkout_session(
    checkout_session_id: str,
    *,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    return request_json(
        PROVIDER,
        "GET",
        f"{settings.STRIPE_API_URL}/checkout/sessions/{checkout_session_id}",
        headers=_headers(),
        client=client,
    )
