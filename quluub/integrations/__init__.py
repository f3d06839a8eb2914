"""
Thin httpx clients for the third-party services the marketplace relies on:
Paystack and Stripe for payments and payouts, Whereby for video rooms.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from quluub.config import settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a payment or video provider rejects or fails a call."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


def request_json(
    provider: str,
    method: str,
    url: str,
    *,
    headers: Dict[str, str],
    json: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """
    Perform one provider call and return the decoded JSON body.

    ``client`` lets callers (and tests) supply their own transport; otherwise a
    short-lived client with the configured timeout is used.
    """
    owns_client = client is None
    http_client = client or httpx.Client(timeout=settings.PROVIDER_TIMEOUT_SECONDS)
    try:
        response = http_client.request(method, url, headers=headers, params=params, json=json, data=data)
    except httpx.HTTPError as exc:
        logger.error("%s request %s %s failed: %s", provider, method, url, exc)
        raise ProviderError(provider, "Provider is unreachable") from exc
    finally:
        if owns_client:
            http_client.close()

    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.status_code >= 400:
        message = _error_message(body) or response.text or "Request failed"
        logger.error("%s returned %s for %s %s: %s", provider, response.status_code, method, url, message)
        raise ProviderError(provider, message, status_code=response.status_code)

    return body


def _error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    if isinstance(body.get("error"), dict):
        return body["error"].get("message")
    return body.get("message") or body.get("error")
