# quluub/api/reviews.py
"""
Review & Rating API Endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quluub import models
from quluub.api.errors import service_errors
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.schemas.review import RatingSummary, ReviewResponse
from quluub.services import review_service
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def _require_counselor(db: Session, counselor_id: int) -> None:
    if not user_crud.get_counselor_user(db, counselor_id):
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.get("/counselor/{counselor_id}", response_model=List[ReviewResponse])
def get_counselor_reviews(
    counselor_id: int,
    limit: int = Query(50, ge=1, le=100, description="Maximum reviews to return"),
    offset: int = Query(0, ge=0, description="Number of reviews to skip"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get all reviews for a counselor, newest first.
    """
    _require_counselor(db, counselor_id)
    return review_service.get_counselor_reviews(db, counselor_id, limit=limit, offset=offset)


@router.get("/counselor/{counselor_id}/summary", response_model=RatingSummary)
def get_counselor_rating_summary(
    counselor_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Average rating, review count and star distribution for a counselor.
    """
    _require_counselor(db, counselor_id)
    return review_service.get_counselor_rating_summary(db, counselor_id)


@router.get("/session/{session_id}", response_model=Optional[ReviewResponse])
def get_session_review(
    session_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Review for a session; only its participants may view it.
    """
    with service_errors():
        return review_service.get_session_review(db, session_id, current_user.id)
