"""
Connection requests, messages, complaints, notifications and the admin
console.
"""

from decimal import Decimal

import pytest
from fastapi import HTTPException

from quluub import models
from quluub.api import admin as admin_api
from quluub.api import complaints as complaints_api
from quluub.api import connection_requests as requests_api
from quluub.api import messages as messages_api
from quluub.api import notifications as notifications_api
from quluub.models.session import STATUS_CANCELED, STATUS_COMPLETED, STATUS_PAID
from quluub.schemas.social import (
    ComplaintCreate,
    ComplaintStatusUpdate,
    ConnectionRequestCreate,
    ConnectionRequestUpdate,
    MessageCreate,
)
from quluub.schemas.user import AdminUserUpdate


@pytest.fixture
def pair(make_user):
    return make_user(role="client"), make_user(role="counselor")


# ======================
# CONNECTION REQUESTS
# ======================

class TestConnectionRequests:
    def test_send_and_accept(self, db_session, pair):
        client, counselor = pair
        sent = requests_api.send_request(
            ConnectionRequestCreate(counselor_id=counselor.id), current_user=client, db=db_session
        )
        assert sent["status"] == "pending"

        pending = requests_api.get_pending_requests(current_user=counselor, db=db_session)
        assert [r["id"] for r in pending] == [sent["id"]]

        updated = requests_api.respond_to_request(
            sent["id"], ConnectionRequestUpdate(status="accepted"), current_user=counselor, db=db_session
        )
        assert updated["status"] == "accepted"
        assert requests_api.get_pending_requests(current_user=counselor, db=db_session) == []
        assert db_session.query(models.Notification).filter_by(
            recipient_id=client.id, event_type="request_updated"
        ).count() == 1

    def test_duplicate_request_rejected(self, db_session, pair):
        client, counselor = pair
        payload = ConnectionRequestCreate(counselor_id=counselor.id)
        requests_api.send_request(payload, current_user=client, db=db_session)
        with pytest.raises(HTTPException) as exc:
            requests_api.send_request(payload, current_user=client, db=db_session)
        assert exc.value.status_code == 400
        assert exc.value.detail == "Request already sent"

    def test_request_to_non_counselor_not_found(self, db_session, pair, make_user):
        client, _ = pair
        with pytest.raises(HTTPException) as exc:
            requests_api.send_request(
                ConnectionRequestCreate(counselor_id=make_user().id), current_user=client, db=db_session
            )
        assert exc.value.status_code == 404

    def test_respond_guards(self, db_session, pair, make_user):
        client, counselor = pair
        sent = requests_api.send_request(
            ConnectionRequestCreate(counselor_id=counselor.id), current_user=client, db=db_session
        )

        with pytest.raises(HTTPException) as exc:
            requests_api.respond_to_request(
                sent["id"], ConnectionRequestUpdate(status="accepted"),
                current_user=make_user(role="counselor"), db=db_session,
            )
        assert exc.value.status_code == 401

        with pytest.raises(HTTPException) as exc:
            requests_api.respond_to_request(
                sent["id"], ConnectionRequestUpdate(status="maybe"), current_user=counselor, db=db_session
            )
        assert exc.value.status_code == 400

        with pytest.raises(HTTPException) as exc:
            requests_api.respond_to_request(
                999, ConnectionRequestUpdate(status="accepted"), current_user=counselor, db=db_session
            )
        assert exc.value.status_code == 404

        with pytest.raises(HTTPException) as exc:
            requests_api.get_pending_requests(current_user=client, db=db_session)
        assert exc.value.status_code == 403


# ======================
# MESSAGES
# ======================

class TestMessages:
    def send(self, db, sender, receiver, content):
        return messages_api.send_message(
            MessageCreate(receiver_id=receiver.id, content=content), current_user=sender, db=db
        )

    def test_history_is_oldest_first_and_marks_read(self, db_session, pair):
        client, counselor = pair
        self.send(db_session, client, counselor, "Hello")
        self.send(db_session, counselor, client, "Hi, how can I help?")

        history = messages_api.get_chat_history(client.id, current_user=counselor, db=db_session)

        assert [m["content"] for m in history] == ["Hello", "Hi, how can I help?"]
        first = db_session.get(models.Message, history[0]["id"])
        second = db_session.get(models.Message, history[1]["id"])
        assert first.is_read is True
        assert second.is_read is False

    def test_conversations_show_latest_message_per_partner(self, db_session, pair, make_user):
        client, counselor = pair
        other = make_user(role="counselor")
        self.send(db_session, client, counselor, "first")
        self.send(db_session, client, other, "to other")
        self.send(db_session, counselor, client, "latest")

        conversations = messages_api.list_conversations(current_user=client, db=db_session)

        assert [c["with_user"]["id"] for c in conversations] == [counselor.id, other.id]
        assert conversations[0]["last_message"]["content"] == "latest"

    def test_send_validation_and_notification(self, db_session, pair):
        client, counselor = pair
        with pytest.raises(HTTPException) as exc:
            self.send(db_session, client, counselor, "   ")
        assert exc.value.status_code == 400

        with pytest.raises(HTTPException) as exc:
            messages_api.send_message(
                MessageCreate(receiver_id=999, content="hi"), current_user=client, db=db_session
            )
        assert exc.value.status_code == 404

        self.send(db_session, client, counselor, "  trimmed  ")
        assert db_session.query(models.Message).one().content == "trimmed"
        assert db_session.query(models.Notification).filter_by(
            recipient_id=counselor.id, event_type="message_received"
        ).count() == 1


# ======================
# COMPLAINTS & NOTIFICATIONS
# ======================

class TestComplaints:
    def test_complaint_notifies_admins(self, db_session, pair, make_user):
        client, counselor = pair
        admins = [make_user(role="admin"), make_user(role="admin")]

        complaint = complaints_api.file_complaint(
            ComplaintCreate(reported_user_id=counselor.id, reason="No show", description=" Missed twice "),
            current_user=client,
            db=db_session,
        )

        assert complaint["status"] == "pending"
        assert complaint["description"] == "Missed twice"
        recipients = {
            n.recipient_id for n in db_session.query(models.Notification).filter_by(event_type="complaint_filed")
        }
        assert recipients == {a.id for a in admins}

    @pytest.mark.parametrize("reason", ["   ", "self"])
    def test_invalid_complaints(self, db_session, pair, reason):
        client, counselor = pair
        target = client.id if reason == "self" else counselor.id
        with pytest.raises(HTTPException) as exc:
            complaints_api.file_complaint(
                ComplaintCreate(reported_user_id=target, reason=reason), current_user=client, db=db_session
            )
        assert exc.value.status_code == 400

    def test_unknown_reported_user(self, db_session, pair):
        client, _ = pair
        with pytest.raises(HTTPException) as exc:
            complaints_api.file_complaint(
                ComplaintCreate(reported_user_id=999, reason="Spam"), current_user=client, db=db_session
            )
        assert exc.value.status_code == 404


class TestNotifications:
    def test_read_flow(self, db_session, pair):
        client, counselor = pair
        for text in ("one", "two"):
            messages_api.send_message(
                MessageCreate(receiver_id=counselor.id, content=text), current_user=client, db=db_session
            )

        assert notifications_api.get_unread_count(current_user=counselor, db=db_session) == {"unread_count": 2}
        items = notifications_api.get_my_notifications(
            unread_only=False, limit=50, current_user=counselor, db=db_session
        )
        notifications_api.mark_notification_read(items[0]["id"], current_user=counselor, db=db_session)
        assert notifications_api.get_unread_count(current_user=counselor, db=db_session) == {"unread_count": 1}

        result = notifications_api.mark_all_notifications_read(current_user=counselor, db=db_session)
        assert result["updated"] == 1
        assert notifications_api.get_unread_count(current_user=counselor, db=db_session) == {"unread_count": 0}

    def test_cannot_read_someone_elses_notification(self, db_session, pair):
        client, counselor = pair
        messages_api.send_message(
            MessageCreate(receiver_id=counselor.id, content="hi"), current_user=client, db=db_session
        )
        note = db_session.query(models.Notification).one()
        with pytest.raises(HTTPException) as exc:
            notifications_api.mark_notification_read(note.id, current_user=client, db=db_session)
        assert exc.value.status_code == 404


# ======================
# ADMIN
# ======================

class TestAdmin:
    def test_dashboard_overview(self, db_session, pair, make_user, make_session):
        client, counselor = pair
        busy = make_user(role="counselor")
        admin = make_user(role="admin")
        make_session(client, counselor, status=STATUS_COMPLETED, price="50.00")
        make_session(client, busy, status=STATUS_COMPLETED, price="50.00")
        make_session(client, busy, status=STATUS_COMPLETED, price="25000.00", currency="ngn")
        make_session(client, busy, status=STATUS_PAID)
        make_session(client, counselor, status=STATUS_CANCELED)
        db_session.add(models.Complaint(reporter_id=client.id, reported_user_id=busy.id, reason="Late"))
        db_session.commit()

        overview = admin_api.get_dashboard_overview(admin=admin, db=db_session)

        assert overview["user_stats"] == {"total_clients": 1, "total_counselors": 2}
        assert overview["session_stats"] == {"completed": 3, "ongoing": 1, "canceled": 1}
        assert overview["revenue"]["usd"] == Decimal("100.00")
        assert overview["revenue"]["ngn"] == Decimal("25000.00")
        top = overview["most_active_counselors"]
        assert top[0]["counselor_id"] == busy.id
        assert top[0]["session_count"] == 2
        assert overview["pending_complaints"] == 1

    def test_suspend_toggle_and_admin_protection(self, db_session, pair, make_user):
        client, _ = pair
        admin = make_user(role="admin")

        assert admin_api.toggle_suspension(client.id, admin=admin, db=db_session)["is_suspended"] is True
        assert admin_api.toggle_suspension(client.id, admin=admin, db=db_session)["is_suspended"] is False

        with pytest.raises(HTTPException) as exc:
            admin_api.toggle_suspension(make_user(role="admin").id, admin=admin, db=db_session)
        assert exc.value.status_code == 400

    def test_verify_and_approve_counselors_only(self, db_session, pair, make_user):
        client, counselor = pair
        admin = make_user(role="admin")

        with pytest.raises(HTTPException) as exc:
            admin_api.verify_counselor(client.id, admin=admin, db=db_session)
        assert exc.value.status_code == 400

        assert admin_api.verify_counselor(counselor.id, admin=admin, db=db_session)["is_verified"] is True
        admin_api.approve_counselor(counselor.id, admin=admin, db=db_session)
        profile = db_session.query(models.Counselor).filter_by(user_id=counselor.id).one()
        assert profile.is_approved is True

    def test_update_and_delete_users(self, db_session, pair, make_user):
        client, counselor = pair
        admin = make_user(role="admin")

        with pytest.raises(HTTPException) as exc:
            admin_api.update_user(client.id, AdminUserUpdate(role="superuser"), admin=admin, db=db_session)
        assert exc.value.status_code == 400

        with pytest.raises(HTTPException) as exc:
            admin_api.update_user(client.id, AdminUserUpdate(email=counselor.email), admin=admin, db=db_session)
        assert exc.value.status_code == 400

        updated = admin_api.update_user(
            client.id, AdminUserUpdate(first_name="Renamed", email="New@Example.com"), admin=admin, db=db_session
        )
        assert updated["first_name"] == "Renamed"
        assert updated["email"] == "new@example.com"

        with pytest.raises(HTTPException) as exc:
            admin_api.delete_user(admin.id, admin=admin, db=db_session)
        assert exc.value.status_code == 400

        admin_api.delete_user(client.id, admin=admin, db=db_session)
        assert db_session.get(models.User, client.id) is None

    def test_complaint_status_update(self, db_session, pair, make_user):
        client, counselor = pair
        admin = make_user(role="admin")
        complaint = models.Complaint(reporter_id=client.id, reported_user_id=counselor.id, reason="Rude")
        db_session.add(complaint)
        db_session.commit()

        with pytest.raises(HTTPException) as exc:
            admin_api.update_complaint_status(
                complaint.id, ComplaintStatusUpdate(status="closed"), admin=admin, db=db_session
            )
        assert exc.value.status_code == 400
        assert exc.value.detail == "Invalid status provided."

        result = admin_api.update_complaint_status(
            complaint.id, ComplaintStatusUpdate(status="resolved"), admin=admin, db=db_session
        )
        assert result["status"] == "resolved"

    def test_transactions_and_chat_review(self, db_session, pair, make_user, make_session):
        client, counselor = pair
        admin = make_user(role="admin")
        make_session(client, counselor)
        make_session(client, counselor, status=STATUS_PAID)
        make_session(client, counselor, status=STATUS_COMPLETED)
        messages_api.send_message(
            MessageCreate(receiver_id=counselor.id, content="hello"), current_user=client, db=db_session
        )

        assert len(admin_api.get_all_sessions(admin=admin, db=db_session)) == 3
        assert {s["status"] for s in admin_api.get_transactions(admin=admin, db=db_session)} == {
            STATUS_PAID, STATUS_COMPLETED
        }
        chat = admin_api.get_chat_between(counselor.id, client.id, admin=admin, db=db_session)
        assert [m["content"] for m in chat] == ["hello"]

    def test_users_filtered_by_role(self, db_session, pair, make_user):
        admin = make_user(role="admin")
        counselors = admin_api.get_all_users(role="counselor", admin=admin, db=db_session)
        assert [u["role"] for u in counselors] == ["counselor"]
