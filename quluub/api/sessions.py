# quluub/api/sessions.py
"""
Session endpoints: listing, booking, rescheduling, completion, cancellation
and rating.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quluub import models
from quluub.api.errors import service_errors
from quluub.crud import session as session_crud
from quluub.database import get_db
from quluub.models.user import ROLE_COUNSELOR
from quluub.schemas.review import RatingSubmit
from quluub.schemas.session import SessionReschedule, SessionResponse, SessionSchedule
from quluub.services import review_service, session_service
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/sessions", tags=["sessions"])


# ======================
# SESSION LISTING
# ======================
@router.get("/", response_model=List[SessionResponse])
def get_sessions(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Sessions for the caller by role, newest first"""
    sessions = session_service.list_sessions_for_user(db, current_user)
    return [session_service.serialize_session(s) for s in sessions]


@router.get("/list-for-counselor", response_model=List[SessionResponse])
def list_for_counselor(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role != ROLE_COUNSELOR:
        raise HTTPException(status_code=403, detail="User is not a counselor")
    sessions = session_crud.list_for_counselor(db, current_user.id)
    return [session_service.serialize_session(s) for s in sessions]


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        session = session_service.get_session_for_participant(db, session_id, current_user.id)
    return session_service.serialize_session(session)


# ======================
# BOOKING
# ======================
@router.post("/schedule", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def schedule_session(
    payload: SessionSchedule,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        session = session_service.schedule_session(
            db,
            current_user,
            date=payload.date,
            counselor_id=payload.counselor_id,
            client_id=payload.client_id,
            currency=payload.currency,
            duration=payload.duration,
            notes=payload.notes,
        )
    return session_service.serialize_session(session)


# ======================
# LIFECYCLE
# ======================
@router.put("/{session_id}/reschedule", response_model=SessionResponse)
def reschedule_session(
    session_id: int,
    payload: SessionReschedule,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        session = session_service.reschedule_session(db, current_user, session_id, payload.date)
    return session_service.serialize_session(session)


@router.put("/{session_id}/complete", response_model=SessionResponse)
def complete_session(
    session_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        session = session_service.complete_session(db, current_user, session_id)
    return session_service.serialize_session(session)


@router.put("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        session = session_service.cancel_session(db, current_user, session_id)
    return session_service.serialize_session(session)


@router.post("/{session_id}/rate", status_code=status.HTTP_201_CREATED)
def rate_session(
    session_id: int,
    payload: RatingSubmit,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        review = review_service.submit_review(
            db,
            session_id=session_id,
            client_id=current_user.id,
            rating=payload.rating,
            comment=payload.comment
        )
    return {"message": "Rating submitted successfully.", "review": review}
