"""
Counselor profiles: onboarding, profile edits, rates, availability and the
public directory.
"""

from decimal import Decimal

import pytest
from fastapi import HTTPException

from quluub import models
from quluub.api import counselors as counselors_api
from quluub.api import users as users_api
from quluub.schemas.counselor import AvailabilityUpdate, CounselorOnboarding, CounselorProfileUpdate, RateUpdate
from quluub.schemas.user import ChangePasswordRequest, ClientOnboarding
from quluub.services import counselor_service, session_service
from quluub.services.errors import PermissionDeniedError, ServiceError
from quluub.utils.security import get_password_hash, verify_password


def onboard(db, counselor, **fields):
    data = {
        "university": "University of Lagos",
        "field_of_specialization": "Marriage, Family",
        "country_of_residence": "Nigeria",
        "languages": ["English", "Yoruba"],
    }
    data.update(fields)
    return counselors_api.counselor_onboarding(CounselorOnboarding(**data), current_user=counselor, db=db)


class TestOnboarding:
    def test_onboarding_creates_profile(self, db_session, make_user):
        counselor = make_user(role="counselor")
        profile = onboard(db_session, counselor)

        assert profile["university"] == "University of Lagos"
        assert profile["session_rate"] == 50
        db_session.refresh(counselor)
        assert counselor.onboarding_completed is True

    def test_clients_cannot_onboard_as_counselor(self, db_session, make_user):
        with pytest.raises(HTTPException) as exc:
            onboard(db_session, make_user(role="client"))
        assert exc.value.status_code == 403

    def test_client_onboarding_updates_user(self, db_session, make_user):
        client = make_user()
        user = users_api.complete_onboarding(
            ClientOnboarding(country="Nigeria", city="Lagos"), current_user=client, db=db_session
        )
        assert user.onboarding_completed is True
        assert user.city == "Lagos"


class TestProfileUpdates:
    def test_blank_fields_keep_previous_values(self, db_session, make_user):
        counselor = make_user(role="counselor")
        onboard(db_session, counselor, bio="Ten years of practice")

        detail = counselors_api.update_counselor_profile(
            CounselorProfileUpdate(bio="", university="UNILAG", languages=[], first_name="Zainab"),
            current_user=counselor,
            db=db_session,
        )

        assert detail["bio"] == "Ten years of practice"
        assert detail["university"] == "UNILAG"
        assert detail["languages"] == ["English", "Yoruba"]
        assert detail["first_name"] == "Zainab"

    def test_rates_must_be_positive(self, db_session, make_user):
        counselor = make_user(role="counselor")
        result = counselors_api.set_session_rates(
            RateUpdate(session_rate=75, ngn_session_rate=30000), current_user=counselor, db=db_session
        )
        assert result == {"session_rate": 75, "ngn_session_rate": 30000}

        with pytest.raises(ServiceError):
            counselor_service.set_rates(db_session, counselor, 0, 30000)

    def test_rates_keep_cents(self, db_session, make_user):
        counselor = make_user(role="counselor")
        profile = counselor_service.set_rates(db_session, counselor, "49.99", 24999.5)

        assert profile.session_rate == Decimal("49.99")
        assert profile.ngn_session_rate == Decimal("24999.50")
        assert session_service.session_price(db_session, counselor.id, "usd") == Decimal("49.99")
        assert session_service.session_price(db_session, counselor.id, "ngn") == Decimal("24999.50")

    @pytest.mark.parametrize("rate", ["0.001", "-5", "abc", None])
    def test_rates_that_are_not_a_positive_amount(self, db_session, make_user, rate):
        counselor = make_user(role="counselor")
        with pytest.raises(ServiceError):
            counselor_service.set_rates(db_session, counselor, rate, 30000)

    def test_availability_is_normalized(self, db_session, make_user):
        counselor = make_user(role="counselor")
        result = counselors_api.set_availability(
            AvailabilityUpdate(availability={"Monday": ["10:00", "09:00", "10:00"], "friday": []}),
            current_user=counselor,
            db=db_session,
        )
        assert result["availability"] == {"monday": ["09:00", "10:00"], "friday": []}

    @pytest.mark.parametrize("availability", [{"funday": ["09:00"]}, {"monday": ["9am"]}, {"monday": ["24:00"]}])
    def test_invalid_availability_is_unprocessable(self, db_session, make_user, availability):
        counselor = make_user(role="counselor")
        with pytest.raises(HTTPException) as exc:
            counselors_api.set_availability(
                AvailabilityUpdate(availability=availability), current_user=counselor, db=db_session
            )
        assert exc.value.status_code == 422

    def test_availability_role_check_comes_first(self, db_session, make_user):
        with pytest.raises(PermissionDeniedError):
            counselor_service.set_availability(db_session, make_user(), {"funday": []})


class TestDirectory:
    def test_listing_fills_display_defaults(self, db_session, make_user):
        make_user(role="counselor")
        make_user(role="client")

        cards = counselors_api.list_counselors(approved_only=False, current_user=make_user(), db=db_session)

        assert len(cards) == 1
        card = cards[0]
        assert card["specialty"] == "General Wellness"
        assert card["specialties"] == []
        assert card["country"] == "N/A"
        assert card["session_rate"] == 50
        assert card["ngn_session_rate"] == 25000

    def test_specialties_are_split(self, db_session, make_user):
        counselor = make_user(role="counselor")
        onboard(db_session, counselor)
        card = counselors_api.list_counselors(approved_only=False, current_user=counselor, db=db_session)[0]
        assert card["specialty"] == "Marriage, Family"
        assert card["specialties"] == ["Marriage", "Family"]
        assert card["country"] == "Nigeria"

    def test_hidden_and_unapproved_filters(self, db_session, make_user):
        make_user(role="counselor", is_visible=False)
        approved = make_user(role="counselor")
        db_session.add(models.Counselor(user_id=approved.id, is_approved=True))
        make_user(role="counselor")
        db_session.commit()

        viewer = make_user()
        assert len(counselors_api.list_counselors(approved_only=False, current_user=viewer, db=db_session)) == 2
        only_approved = counselors_api.list_counselors(approved_only=True, current_user=viewer, db=db_session)
        assert [c["id"] for c in only_approved] == [approved.id]

    def test_detail_and_not_found(self, db_session, make_user):
        counselor = make_user(role="counselor")
        onboard(db_session, counselor)
        detail = counselors_api.get_counselor(counselor.id, current_user=counselor, db=db_session)
        assert detail["email"] == counselor.email
        assert detail["university"] == "University of Lagos"

        client = make_user()
        with pytest.raises(HTTPException) as exc:
            counselors_api.get_counselor(client.id, current_user=client, db=db_session)
        assert exc.value.status_code == 404


class TestPasswordChange:
    def test_change_password(self, db_session, make_user):
        user = make_user(password_hash=get_password_hash("old-secret"))

        with pytest.raises(HTTPException) as exc:
            users_api.change_password(
                ChangePasswordRequest(current_password="wrong", new_password="new-secret"),
                current_user=user,
                db=db_session,
            )
        assert exc.value.status_code == 400

        users_api.change_password(
            ChangePasswordRequest(current_password="old-secret", new_password="new-secret"),
            current_user=user,
            db=db_session,
        )
        assert verify_password("new-secret", user.password_hash)
