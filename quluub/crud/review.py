# quluub/crud/review.py
"""
Review CRUD Operations

Database operations for session reviews and counselor rating aggregates.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from quluub.models.review import Review
from quluub.models.session import Session as SessionModel, STATUS_COMPLETED
from quluub.models.user import User


# ======================
# REVIEW CRUD
# ======================

def create_review(
    db: Session,
    session_id: int,
    client_id: int,
    counselor_id: int,
    rating: int,
    comment: Optional[str] = None
) -> Review:
    """
    Create a new review for a completed session.

    Args:
        db: Database session
        session_id: Session identifier
        client_id: Client user ID
        counselor_id: Counselor user ID
        rating: Rating value (1-5)
        comment: Optional text comment

    Returns:
        Created Review object

    Raises:
        ValueError: If rating is out of range
    """
    if not (1 <= rating <= 5):
        raise ValueError("A rating between 1 and 5 is required.")

    review = Review(
        session_id=session_id,
        client_id=client_id,
        counselor_id=counselor_id,
        rating=rating,
        comment=comment
    )

    db.add(review)
    db.flush()
    return review


def get_review_by_session(db: Session, session_id: int) -> Optional[Review]:
    """
    Get review for a specific session.

    Args:
        db: Database session
        session_id: Session identifier

    Returns:
        Review object or None if not found
    """
    return db.query(Review).filter(Review.session_id == session_id).first()


def get_counselor_reviews(
    db: Session,
    counselor_id: int,
    skip: int = 0,
    limit: int = 50
) -> List[Review]:
    """
    Get all reviews received by a counselor, newest first.

    Args:
        db: Database session
        counselor_id: Counselor user ID
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        List of Review objects
    """
    return db.query(Review).filter(
        Review.counselor_id == counselor_id
    ).order_by(
        Review.created_at.desc(), Review.id.desc()
    ).offset(skip).limit(limit).all()


# ======================
# RATING AGGREGATES
# ======================

def get_rating_distribution(db: Session, counselor_id: int) -> Dict[int, int]:
    """
    Count reviews per star value.

    Returns:
        Mapping of 1..5 to review count (missing stars map to 0)
    """
    rows = db.query(Review.rating, func.count(Review.id)).filter(
        Review.counselor_id == counselor_id
    ).group_by(Review.rating).all()

    distribution = {star: 0 for star in range(1, 6)}
    for rating, count in rows:
        distribution[int(rating)] = int(count)
    return distribution


def calculate_counselor_rating(db: Session, counselor_id: int) -> Tuple[float, int]:
    """
    Average rating and review count for a counselor.

    Returns:
        Tuple of (average rounded to 2 places, total reviews)
    """
    average, total = db.query(
        func.avg(Review.rating), func.count(Review.id)
    ).filter(Review.counselor_id == counselor_id).one()

    return round(float(average or 0.0), 2), int(total or 0)


def update_counselor_rating(db: Session, counselor_id: int) -> Optional[User]:
    """
    Recompute and store the counselor's average_rating and reviews_count.

    Args:
        db: Database session
        counselor_id: Counselor user ID

    Returns:
        Updated User object, or None if the counselor does not exist
    """
    counselor = db.query(User).filter(User.id == counselor_id).first()
    if not counselor:
        return None

    average, total = calculate_counselor_rating(db, counselor_id)
    counselor.average_rating = average
    counselor.reviews_count = total
    db.flush()
    return counselor


# ======================
# VALIDATION HELPERS
# ======================

def can_review_session(
    db: Session,
    session_id: int,
    client_id: int
) -> Tuple[bool, str, int]:
    """
    Check whether a client can review a session.

    Returns:
        Tuple of (can_review, reason, http_status)
    """
    session = db.query(SessionModel).filter(SessionModel.id == session_id).first()
    if not session:
        return False, "Session not found", 404

    if session.client_id != client_id:
        return False, "You are not authorized to rate this session", 403

    if session.status != STATUS_COMPLETED:
        return False, "Only completed sessions can be rated", 400

    if get_review_by_session(db, session_id):
        return False, "This session has already been rated", 400

    return True, "Eligible for review", 200
