# quluub/services/review_service.py
"""
Review Service Layer

Business logic for rating completed sessions and keeping the counselor's
rating aggregates current.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quluub.crud import review as review_crud
from quluub.crud import session as session_crud
from quluub.models.review import Review
from quluub.services import notification_service
from quluub.services.errors import NotFoundError, PermissionDeniedError, ServiceError

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


def serialize_review(review: Review) -> Dict[str, Any]:
    return {
        "id": review.id,
        "session_id": review.session_id,
        "client_id": review.client_id,
        "client_name": review.client.name if review.client else "Unknown",
        "counselor_id": review.counselor_id,
        "rating": review.rating,
        "comment": review.comment,
        "created_at": review.created_at.isoformat() if review.created_at else None
    }


# ======================
# REVIEW SUBMISSION
# ======================

def submit_review(
    db: Session,
    session_id: int,
    client_id: int,
    rating: Optional[int],
    comment: Optional[str] = None
) -> Dict[str, Any]:
    """
    Submit a review for a completed session.

    Validates eligibility, creates the review and recomputes the counselor's
    average rating and review count in the same transaction.

    Args:
        db: Database session
        session_id: Session identifier
        client_id: Client user ID
        rating: Rating value (1-5)
        comment: Optional text comment

    Returns:
        Dictionary with review details and the counselor's new aggregates

    Raises:
        ServiceError: If the rating, comment or session state is invalid
    """
    # Zero stars means the client never picked a rating
    if rating is None or not (1 <= int(rating) <= 5):
        raise ServiceError("A rating between 1 and 5 is required.")

    comment = (comment or "").strip() or None
    if comment and len(comment) > MAX_COMMENT_LENGTH:
        raise ServiceError("Comment must be 1000 characters or less")

    can_review, reason, status_code = review_crud.can_review_session(db, session_id, client_id)
    if not can_review:
        if status_code == 404:
            raise NotFoundError(reason)
        if status_code == 403:
            raise PermissionDeniedError(reason)
        raise ServiceError(reason)

    session = session_crud.get_session(db, session_id)

    try:
        review = review_crud.create_review(
            db=db,
            session_id=session_id,
            client_id=client_id,
            counselor_id=session.counselor_id,
            rating=int(rating),
            comment=comment
        )
        counselor = review_crud.update_counselor_rating(db, session.counselor_id)
        notification = notification_service.create_notification(
            db,
            recipient_id=session.counselor_id,
            actor_id=client_id,
            session_id=session_id,
            event_type="review_received",
            message=f"You received a {int(rating)}-star review."
        )
        db.commit()
    except IntegrityError:
        # Unique session_id lost a race with a concurrent submission
        db.rollback()
        raise ServiceError("This session has already been rated")

    notification_service.dispatch_email_for_notification(db, notification)
    logger.info("Session %s rated %s by client %s", session_id, rating, client_id)

    db.refresh(review)
    result = serialize_review(review)
    result.update({
        "counselor_average_rating": counselor.average_rating if counselor else None,
        "counselor_reviews_count": counselor.reviews_count if counselor else None,
        "message": "Review submitted successfully"
    })
    return result


# ======================
# REVIEW RETRIEVAL
# ======================

def get_counselor_reviews(
    db: Session,
    counselor_id: int,
    limit: int = 50,
    offset: int = 0
) -> List[Dict[str, Any]]:
    """
    Get all reviews for a counselor with formatted output.

    Args:
        db: Database session
        counselor_id: Counselor user ID
        limit: Maximum reviews to return
        offset: Number of reviews to skip

    Returns:
        List of formatted review dictionaries
    """
    reviews = review_crud.get_counselor_reviews(db, counselor_id, skip=offset, limit=limit)
    return [serialize_review(r) for r in reviews]


def get_counselor_rating_summary(db: Session, counselor_id: int) -> Dict[str, Any]:
    """
    Get rating summary for a counselor.

    Returns:
        Dictionary with average, count and 1..5 distribution
    """
    average, total = review_crud.calculate_counselor_rating(db, counselor_id)
    distribution = review_crud.get_rating_distribution(db, counselor_id)

    return {
        "counselor_id": counselor_id,
        "average_rating": average,
        "total_reviews": total,
        "rating_distribution": distribution
    }


def get_session_review(db: Session, session_id: int, user_id: int) -> Optional[Dict[str, Any]]:
    """
    Review attached to a session, visible to its participants only.

    Raises:
        NotFoundError: Session does not exist
        PermissionDeniedError: Caller is not a participant
    """
    session = session_crud.get_session(db, session_id)
    if not session:
        raise NotFoundError("Session not found")
    if not session_crud.is_participant(session, user_id):
        raise PermissionDeniedError("You are not a participant in this session")

    review = review_crud.get_review_by_session(db, session_id)
    return serialize_review(review) if review else None
