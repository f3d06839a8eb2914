"""Counselor profiles: onboarding, profile edits, rates, availability and listings."""

import logging
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from quluub import models
from quluub.config import settings
from quluub.crud import counselor as counselor_crud
from quluub.models.user import ROLE_COUNSELOR
from quluub.services.errors import PermissionDeniedError, ServiceError
from quluub.utils.money import to_money

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DEFAULT_SPECIALTY = "General Wellness"

PROFILE_FIELDS = (
    "nationality",
    "country_of_residence",
    "city_of_residence",
    "marital_status",
    "date_of_birth",
    "university",
    "license_number",
    "field_of_specialization",
    "years_of_experience",
    "specializations",
    "languages",
    "bio",
    "profile_picture",
)
USER_FIELDS = ("first_name", "last_name", "phone")


def _require_counselor(user: models.User) -> None:
    if user.role != ROLE_COUNSELOR:
        raise PermissionDeniedError("Access denied. User is not a counselor.")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list)) and len(value) == 0)


# ─────────────────────────────────────────────
# Onboarding & profile
# ─────────────────────────────────────────────

def complete_onboarding(db: Session, user: models.User, data: Dict[str, Any]) -> models.Counselor:
    """Create or overwrite the counselor profile and mark onboarding done."""
    _require_counselor(user)

    profile = counselor_crud.get_or_create_profile(db, user.id)
    for field in PROFILE_FIELDS:
        if field in data:
            setattr(profile, field, data[field])

    user.onboarding_completed = True
    db.commit()
    db.refresh(profile)
    logger.info("Counselor %s completed onboarding", user.id)
    return profile


def update_profile(db: Session, user: models.User, data: Dict[str, Any]) -> models.Counselor:
    """Missing or empty fields keep their previous value."""
    _require_counselor(user)

    profile = counselor_crud.get_or_create_profile(db, user.id)
    for field in USER_FIELDS:
        if not _is_blank(data.get(field)):
            setattr(user, field, data[field])
    for field in PROFILE_FIELDS:
        if not _is_blank(data.get(field)):
            setattr(profile, field, data[field])

    db.commit()
    db.refresh(profile)
    return profile


def set_rates(db: Session, user: models.User, session_rate: Any, ngn_session_rate: Any) -> models.Counselor:
    _require_counselor(user)
    try:
        usd, ngn = to_money(session_rate), to_money(ngn_session_rate)
    except (ArithmeticError, TypeError, ValueError):
        raise ServiceError("Rates must be numbers")
    if usd <= 0 or ngn <= 0:
        raise ServiceError("Rates must be greater than zero")

    profile = counselor_crud.get_or_create_profile(db, user.id)
    profile.session_rate = usd
    profile.ngn_session_rate = ngn
    db.commit()
    db.refresh(profile)
    return profile


def normalize_availability(availability: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """
    Validate a weekday -> ["HH:MM", ...] map; slots are deduplicated and sorted.

    Raises:
        ValueError: Unknown weekday or malformed slot
    """
    normalized: Dict[str, List[str]] = {}
    for day, slots in (availability or {}).items():
        key = str(day).strip().lower()
        if key not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        for slot in slots or []:
            if not SLOT_PATTERN.match(str(slot)):
                raise ValueError(f"Invalid time slot '{slot}' for {key}, expected HH:MM")
        normalized[key] = sorted(set(str(s) for s in slots or []))
    return normalized


def set_availability(db: Session, user: models.User, availability: Dict[str, List[str]]) -> models.Counselor:
    _require_counselor(user)
    try:
        normalized = normalize_availability(availability)
    except ValueError as e:
        raise ServiceError(str(e), status_code=422)

    profile = counselor_crud.get_or_create_profile(db, user.id)
    profile.availability = normalized
    db.commit()
    db.refresh(profile)
    return profile


# ─────────────────────────────────────────────
# Listings
# ─────────────────────────────────────────────

def split_specialties(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def serialize_profile(profile: Optional[models.Counselor]) -> Dict[str, Any]:
    if profile is None:
        return {}
    data = {field: getattr(profile, field) for field in PROFILE_FIELDS}
    data.update({
        "session_rate": profile.session_rate,
        "ngn_session_rate": profile.ngn_session_rate,
        "is_approved": profile.is_approved,
        "availability": profile.availability or {},
    })
    return data


def _rate_or_default(profile: Optional[models.Counselor], field: str, default: int) -> Decimal:
    rate = getattr(profile, field) if profile else None
    return to_money(default if rate is None else rate)


def counselor_card(user: models.User) -> Dict[str, Any]:
    """Public listing entry with display defaults filled in."""
    profile = user.counselor_profile
    specialization = profile.field_of_specialization if profile else None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "name": user.name or "Counselor",
        "specialty": specialization or DEFAULT_SPECIALTY,
        "specialties": split_specialties(specialization),
        "profile_picture": (profile.profile_picture if profile else None) or "",
        "average_rating": user.average_rating or 0,
        "reviews_count": user.reviews_count or 0,
        "session_rate": _rate_or_default(profile, "session_rate", settings.DEFAULT_USD_SESSION_RATE),
        "ngn_session_rate": _rate_or_default(profile, "ngn_session_rate", settings.DEFAULT_NGN_SESSION_RATE),
        "country": (profile.country_of_residence if profile else None) or "N/A",
        "languages": (profile.languages if profile else None) or [],
        "is_approved": bool(profile and profile.is_approved),
        "is_verified": user.is_verified,
    }


def list_counselors(db: Session, approved_only: bool = False) -> List[Dict[str, Any]]:
    users = counselor_crud.list_counselor_users(db, approved_only=approved_only)
    return [counselor_card(u) for u in users]


def counselor_detail(user: models.User) -> Dict[str, Any]:
    detail = counselor_card(user)
    detail.update(serialize_profile(user.counselor_profile))
    detail["email"] = user.email
    return detail
