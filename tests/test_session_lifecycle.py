"""
Session booking and lifecycle: schedule, reschedule, complete, cancel.
"""

import json
from decimal import Decimal

import httpx
import pytest
from fastapi import HTTPException

from quluub import models
from quluub.api import sessions as sessions_api
from quluub.config import settings
from quluub.models.session import STATUS_CANCELED, STATUS_COMPLETED, STATUS_PAID, STATUS_PENDING_PAYMENT
from quluub.schemas.session import SessionReschedule, SessionSchedule
from quluub.services import session_service
from quluub.services.errors import NotFoundError, PermissionDeniedError, ServiceError


@pytest.fixture
def pair(make_user):
    return make_user(role="client"), make_user(role="counselor")


class TestScheduling:
    def test_client_books_with_counselor_rate(self, db_session, pair):
        client, counselor = pair
        db_session.add(models.Counselor(user_id=counselor.id, session_rate=80, ngn_session_rate=40000))
        db_session.commit()

        session = session_service.schedule_session(
            db_session, client, date="2030-01-01T10:00:00Z", counselor_id=counselor.id
        )
        assert session.status == STATUS_PENDING_PAYMENT
        assert session.client_id == client.id
        assert session.price == Decimal("80.00")
        assert session.currency == "usd"

        ngn = session_service.schedule_session(
            db_session, client, date="2030-01-02T10:00:00Z", counselor_id=counselor.id, currency="NGN"
        )
        assert ngn.price == Decimal("40000.00")

    def test_missing_profile_falls_back_to_default_rate(self, db_session, pair):
        client, counselor = pair
        session = session_service.schedule_session(
            db_session, client, date="2030-01-01T10:00:00", counselor_id=counselor.id
        )
        assert session.price == Decimal("50.00")

    def test_counselor_books_on_behalf_of_client(self, db_session, pair):
        client, counselor = pair
        session = session_service.schedule_session(
            db_session, counselor, date="2030-01-01T10:00:00", client_id=client.id
        )
        assert session.counselor_id == counselor.id
        assert session.client_id == client.id

    def test_counterpart_is_notified(self, db_session, pair):
        client, counselor = pair
        session = session_service.schedule_session(
            db_session, client, date="2030-01-01T10:00:00", counselor_id=counselor.id
        )
        notification = db_session.query(models.Notification).filter_by(recipient_id=counselor.id).one()
        assert notification.event_type == "session_booked"
        assert notification.session_id == session.id

    def test_missing_ids_are_rejected(self, db_session, pair):
        client, counselor = pair
        with pytest.raises(ServiceError, match="Counselor ID is required."):
            session_service.schedule_session(db_session, client, date="2030-01-01T10:00:00")
        with pytest.raises(ServiceError, match="Client ID is required."):
            session_service.schedule_session(db_session, counselor, date="2030-01-01T10:00:00")

    def test_unknown_counterpart_is_not_found(self, db_session, pair):
        client, counselor = pair
        with pytest.raises(NotFoundError):
            session_service.schedule_session(db_session, client, date="2030-01-01T10:00:00", counselor_id=999)
        # A client id that belongs to a counselor is not a client
        with pytest.raises(NotFoundError):
            session_service.schedule_session(
                db_session, counselor, date="2030-01-01T10:00:00", client_id=counselor.id
            )

    def test_admin_cannot_book(self, db_session, make_user, pair):
        _, counselor = pair
        admin = make_user(role="admin")
        with pytest.raises(PermissionDeniedError):
            session_service.schedule_session(
                db_session, admin, date="2030-01-01T10:00:00", counselor_id=counselor.id
            )

    def test_bad_date_and_currency_are_rejected(self, db_session, pair):
        client, counselor = pair
        with pytest.raises(ServiceError, match="Invalid date"):
            session_service.schedule_session(db_session, client, date="soon", counselor_id=counselor.id)
        with pytest.raises(ServiceError, match="Currency"):
            session_service.schedule_session(
                db_session, client, date="2030-01-01T10:00:00", counselor_id=counselor.id, currency="eur"
            )

    def test_endpoint_returns_serialized_session(self, db_session, pair):
        client, counselor = pair
        payload = SessionSchedule(counselor_id=counselor.id, date="2030-01-01T10:00:00Z")
        data = sessions_api.schedule_session(payload, current_user=client, db=db_session)
        assert data["status"] == STATUS_PENDING_PAYMENT
        assert data["is_rated"] is False
        assert data["counselor_name"] == counselor.name


class TestLifecycle:
    def test_reschedule_moves_date_and_notifies(self, db_session, pair, make_session):
        client, counselor = pair
        session = make_session(client, counselor)

        session_service.reschedule_session(db_session, counselor, session.id, "2031-05-05T09:30:00Z")

        db_session.refresh(session)
        assert session.date.year == 2031 and session.date.hour == 9
        assert db_session.query(models.Notification).filter_by(
            recipient_id=client.id, event_type="session_rescheduled"
        ).count() == 1

    def test_paid_reschedule_opens_room_for_new_time(self, db_session, pair, make_session, monkeypatch):
        monkeypatch.setattr(settings, "WHEREBY_API_KEY", "whereby_test")
        client, counselor = pair
        session = make_session(client, counselor, status=STATUS_PAID, video_call_url="https://quluub.whereby.com/old")
        requests = []

        def whereby(request):
            requests.append(json.loads(request.content))
            return httpx.Response(201, json={"roomUrl": "https://quluub.whereby.com/moved"})

        session_service.reschedule_session(
            db_session, client, session.id, "2031-05-05T09:30:00Z",
            video_client=httpx.Client(transport=httpx.MockTransport(whereby)),
        )

        assert session.video_call_url == "https://quluub.whereby.com/moved"
        assert requests[0]["startDate"] == "2031-05-05T09:30:00Z"
        assert requests[0]["endDate"] == "2031-05-05T11:30:00Z"

    def test_paid_reschedule_without_video_provider_drops_old_room(self, db_session, pair, make_session, monkeypatch):
        monkeypatch.setattr(settings, "WHEREBY_API_KEY", None)
        client, counselor = pair
        session = make_session(client, counselor, status=STATUS_PAID, video_call_url="https://quluub.whereby.com/old")

        session_service.reschedule_session(db_session, counselor, session.id, "2031-05-05T09:30:00Z")

        assert session.video_call_url is None
        assert session.status == STATUS_PAID

    def test_reschedule_requires_date(self, db_session, pair, make_session):
        client, counselor = pair
        session = make_session(client, counselor)
        with pytest.raises(HTTPException) as exc:
            sessions_api.reschedule_session(
                session.id, SessionReschedule(), current_user=client, db=db_session
            )
        assert exc.value.status_code == 400
        assert exc.value.detail == "Date is required"

    @pytest.mark.parametrize("status", [STATUS_COMPLETED, STATUS_CANCELED])
    def test_finished_sessions_cannot_be_rescheduled(self, db_session, pair, make_session, status):
        client, counselor = pair
        session = make_session(client, counselor, status=status)
        with pytest.raises(ServiceError):
            session_service.reschedule_session(db_session, client, session.id, "2031-01-01T10:00:00")

    def test_outsider_cannot_touch_session(self, db_session, pair, make_session, make_user):
        client, counselor = pair
        session = make_session(client, counselor, status=STATUS_PAID)
        outsider = make_user(role="client")
        with pytest.raises(HTTPException) as exc:
            sessions_api.complete_session(session.id, current_user=outsider, db=db_session)
        assert exc.value.status_code == 403
        with pytest.raises(HTTPException) as exc:
            sessions_api.get_session(999, current_user=client, db=db_session)
        assert exc.value.status_code == 404

    def test_complete_paid_session_moves_no_money(self, db_session, pair, make_session):
        client, counselor = pair
        session = make_session(client, counselor, status=STATUS_PAID)

        data = sessions_api.complete_session(session.id, current_user=counselor, db=db_session)

        assert data["status"] == STATUS_COMPLETED
        assert db_session.query(models.Transaction).count() == 0

    def test_complete_requires_payment_and_is_not_repeatable(self, db_session, pair, make_session):
        client, counselor = pair
        pending = make_session(client, counselor)
        with pytest.raises(ServiceError, match="Session has not been paid for"):
            session_service.complete_session(db_session, counselor, pending.id)

        done = make_session(client, counselor, status=STATUS_COMPLETED)
        with pytest.raises(ServiceError, match="Session already completed"):
            session_service.complete_session(db_session, counselor, done.id)

    def test_cancel_only_while_awaiting_payment(self, db_session, pair, make_session):
        client, counselor = pair
        pending = make_session(client, counselor)
        assert session_service.cancel_session(db_session, client, pending.id).status == STATUS_CANCELED

        paid = make_session(client, counselor, status=STATUS_PAID)
        with pytest.raises(ServiceError):
            session_service.cancel_session(db_session, client, paid.id)

    def test_listing_by_role(self, db_session, pair, make_session, make_user):
        client, counselor = pair
        other_client = make_user(role="client")
        make_session(client, counselor)
        make_session(other_client, counselor)

        assert len(sessions_api.get_sessions(current_user=client, db=db_session)) == 1
        assert len(sessions_api.get_sessions(current_user=counselor, db=db_session)) == 2
        with pytest.raises(HTTPException) as exc:
            sessions_api.list_for_counselor(current_user=client, db=db_session)
        assert exc.value.status_code == 403
