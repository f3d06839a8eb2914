"""
Reviews & ratings: submission rules, counselor aggregates and summaries.
"""

import pytest
from fastapi import HTTPException

from quluub import models
from quluub.api import reviews as reviews_api
from quluub.api import sessions as sessions_api
from quluub.models.session import STATUS_COMPLETED, STATUS_PAID
from quluub.schemas.review import RatingSubmit
from quluub.services import review_service
from quluub.services.errors import NotFoundError, PermissionDeniedError, ServiceError


@pytest.fixture
def pair(make_user):
    return make_user(role="client"), make_user(role="counselor")


@pytest.fixture
def completed(pair, make_session):
    client, counselor = pair
    return make_session(client, counselor, status=STATUS_COMPLETED)


class TestSubmitReview:
    def test_submit_review_updates_aggregates(self, db_session, pair, completed):
        client, counselor = pair

        result = review_service.submit_review(db_session, completed.id, client.id, 4, "Very helpful")

        assert result["rating"] == 4
        assert result["comment"] == "Very helpful"
        assert result["counselor_average_rating"] == 4.0
        assert result["counselor_reviews_count"] == 1
        db_session.refresh(counselor)
        assert counselor.average_rating == 4.0
        assert counselor.reviews_count == 1

    def test_average_over_several_reviews(self, db_session, pair, make_session):
        client, counselor = pair
        for rating in (5, 4, 4):
            session = make_session(client, counselor, status=STATUS_COMPLETED)
            review_service.submit_review(db_session, session.id, client.id, rating)

        db_session.refresh(counselor)
        assert counselor.average_rating == 4.33
        assert counselor.reviews_count == 3

    @pytest.mark.parametrize("rating", [0, 6, -1, None])
    def test_out_of_range_rating_rejected(self, db_session, pair, completed, rating):
        client, _ = pair
        with pytest.raises(ServiceError, match="A rating between 1 and 5 is required."):
            review_service.submit_review(db_session, completed.id, client.id, rating)

    def test_only_completed_sessions_can_be_rated(self, db_session, pair, make_session):
        client, counselor = pair
        paid = make_session(client, counselor, status=STATUS_PAID)
        with pytest.raises(ServiceError, match="Only completed sessions can be rated"):
            review_service.submit_review(db_session, paid.id, client.id, 5)

    def test_only_the_sessions_client_can_rate(self, db_session, pair, completed):
        _, counselor = pair
        with pytest.raises(PermissionDeniedError):
            review_service.submit_review(db_session, completed.id, counselor.id, 5)

    def test_missing_session(self, db_session, pair):
        client, _ = pair
        with pytest.raises(NotFoundError):
            review_service.submit_review(db_session, 404, client.id, 5)

    def test_session_can_only_be_rated_once(self, db_session, pair, completed):
        client, counselor = pair
        review_service.submit_review(db_session, completed.id, client.id, 5)
        with pytest.raises(ServiceError, match="already been rated"):
            review_service.submit_review(db_session, completed.id, client.id, 3)

        db_session.refresh(counselor)
        assert counselor.reviews_count == 1

    def test_comment_is_trimmed_and_bounded(self, db_session, pair, completed, make_session):
        client, counselor = pair
        result = review_service.submit_review(db_session, completed.id, client.id, 5, "   ")
        assert result["comment"] is None

        other = make_session(client, counselor, status=STATUS_COMPLETED)
        with pytest.raises(ServiceError, match="1000 characters"):
            review_service.submit_review(db_session, other.id, client.id, 5, "x" * 1001)

    def test_counselor_is_notified(self, db_session, pair, completed):
        client, counselor = pair
        review_service.submit_review(db_session, completed.id, client.id, 5)
        notification = db_session.query(models.Notification).filter_by(recipient_id=counselor.id).one()
        assert notification.event_type == "review_received"


class TestRatingEndpoints:
    def test_rate_endpoint_marks_session_rated(self, db_session, pair, completed):
        client, _ = pair
        response = sessions_api.rate_session(
            completed.id, RatingSubmit(rating=5, comment="Great"), current_user=client, db=db_session
        )
        assert response["review"]["rating"] == 5

        data = sessions_api.get_session(completed.id, current_user=client, db=db_session)
        assert data["is_rated"] is True
        assert data["status"] == STATUS_COMPLETED

    def test_missing_rating_is_bad_request(self, db_session, pair, completed):
        client, _ = pair
        with pytest.raises(HTTPException) as exc:
            sessions_api.rate_session(completed.id, RatingSubmit(), current_user=client, db=db_session)
        assert exc.value.status_code == 400

    def test_summary_and_distribution(self, db_session, pair, make_session):
        client, counselor = pair
        for rating in (5, 5, 3):
            session = make_session(client, counselor, status=STATUS_COMPLETED)
            review_service.submit_review(db_session, session.id, client.id, rating)

        summary = reviews_api.get_counselor_rating_summary(counselor.id, current_user=client, db=db_session)
        assert summary["total_reviews"] == 3
        assert summary["average_rating"] == 4.33
        assert summary["rating_distribution"] == {1: 0, 2: 0, 3: 1, 4: 0, 5: 2}

        reviews = reviews_api.get_counselor_reviews(
            counselor.id, limit=50, offset=0, current_user=client, db=db_session
        )
        assert len(reviews) == 3

    def test_summary_for_non_counselor_is_not_found(self, db_session, pair):
        client, _ = pair
        with pytest.raises(HTTPException) as exc:
            reviews_api.get_counselor_rating_summary(client.id, current_user=client, db=db_session)
        assert exc.value.status_code == 404

    def test_session_review_visible_to_participants_only(self, db_session, pair, completed, make_user):
        client, counselor = pair
        assert reviews_api.get_session_review(completed.id, current_user=counselor, db=db_session) is None

        review_service.submit_review(db_session, completed.id, client.id, 4)
        review = reviews_api.get_session_review(completed.id, current_user=counselor, db=db_session)
        assert review["rating"] == 4

        with pytest.raises(HTTPException) as exc:
            reviews_api.get_session_review(completed.id, current_user=make_user(), db=db_session)
        assert exc.value.status_code == 403
