from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quluub import models
from quluub.api.errors import service_errors
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.schemas.counselor import (
    AvailabilityUpdate,
    CounselorOnboarding,
    CounselorProfileUpdate,
    RateUpdate,
)
from quluub.services import counselor_service
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/counselors", tags=["Counselors"])


@router.post("/onboarding")
def counselor_onboarding(
    payload: CounselorOnboarding,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        profile = counselor_service.complete_onboarding(db, current_user, payload.model_dump())
    return counselor_service.serialize_profile(profile)


@router.get("/")
def list_counselors(
    approved_only: bool = Query(False),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return counselor_service.list_counselors(db, approved_only=approved_only)


@router.put("/profile")
def update_counselor_profile(
    payload: CounselorProfileUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        counselor_service.update_profile(db, current_user, payload.model_dump())
    return counselor_service.counselor_detail(current_user)


@router.put("/rates")
def set_session_rates(
    payload: RateUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        profile = counselor_service.set_rates(db, current_user, payload.session_rate, payload.ngn_session_rate)
    return {
        "session_rate": profile.session_rate,
        "ngn_session_rate": profile.ngn_session_rate,
    }


@router.put("/availability")
def set_availability(
    payload: AvailabilityUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        profile = counselor_service.set_availability(db, current_user, payload.availability)
    return {"availability": profile.availability}


@router.get("/{counselor_id}")
def get_counselor(
    counselor_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    counselor = user_crud.get_counselor_user(db, counselor_id)
    if not counselor:
        raise HTTPException(status_code=404, detail="Counselor not found")
    return counselor_service.counselor_detail(counselor)
