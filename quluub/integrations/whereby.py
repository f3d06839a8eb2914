"""Whereby meeting rooms for counseling sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx

from quluub.config import settings
from quluub.integrations import ProviderError, request_json
from quluub.utils.dates import utcnow

logger = logging.getLogger(__name__)

PROVIDER = "whereby"
ROOM_LIFETIME = timedelta(hours=2)


def _headers() -> Dict[str, str]:
    if not settings.WHEREBY_API_KEY:
        raise ProviderError(PROVIDER, "Whereby is not configured")
    return {
        "Authorization": f"Bearer {settings.WHEREBY_API_KEY}",
        "Content-Type": "application/json",
    }


def _iso(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat() + "Z"


def create_meeting(
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    room_name_prefix: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """Create a room; ad-hoc rooms expire ROOM_LIFETIME from now."""
    payload: Dict[str, Any] = {
        "endDate": _iso(end or (utcnow() + ROOM_LIFETIME)),
        "fields": ["roomUrl"],
    }
    if start is not None:
        payload["startDate"] = _iso(start)
        payload["roomMode"] = "group"
        payload["roomNamePattern"] = "personal"
    if room_name_prefix:
        payload["roomNamePrefix"] = room_name_prefix

    return request_json(
        PROVIDER,
        "POST",
        f"{settings.WHEREBY_API_URL}/meetings",
        headers=_headers(),
        json=payload,
        client=client,
    )


def create_session_room(session, *, client: Optional[httpx.Client] = None) -> str:
    """Room available from the session start until two hours later."""
    logger.info("Creating Whereby meeting for session %s", session.id)
    meeting = create_meeting(
        start=session.date,
        end=session.date + ROOM_LIFETIME,
        room_name_prefix=f"session-{session.id}",
        client=client,
    )
    room_url = meeting.get("roomUrl")
    if not room_url:
        raise ProviderError(PROVIDER, "No room URL returned")
    return room_url
