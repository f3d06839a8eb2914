"""
Authentication: signup, login, admin login, current user and role guards.
"""

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from quluub import models
from quluub.api import auth as auth_api
from quluub.schemas.auth import LoginRequest, SignupRequest
from quluub.utils.security import (
    create_access_token,
    create_user_token,
    get_current_user,
    get_password_hash,
    require_role,
)


def _signup(db, **overrides):
    data = {
        "first_name": "Amina",
        "last_name": "Bello",
        "email": "Amina@Example.com",
        "password": "secret123",
        "role": "client",
    }
    data.update(overrides)
    return auth_api.signup(SignupRequest(**data), db=db)


class TestSignup:
    def test_signup_creates_user_wallet_and_token(self, db_session):
        result = _signup(db_session)

        assert result["token_type"] == "bearer"
        assert result["role"] == "client"
        user = db_session.query(models.User).filter_by(email="amina@example.com").one()
        assert user.is_verified is True
        assert user.wallet is not None
        assert user.wallet.balance == 0

    def test_duplicate_email_rejected(self, db_session):
        _signup(db_session)
        with pytest.raises(HTTPException) as exc:
            _signup(db_session, email="amina@example.com")
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("field,value", [
        ("first_name", ""),
        ("last_name", "   "),
        ("email", "not-an-email"),
        ("password", "12345"),
        ("role", "admin"),
    ])
    def test_invalid_signup_payload_rejected(self, field, value):
        data = {
            "first_name": "Amina",
            "last_name": "Bello",
            "email": "amina@example.com",
            "password": "secret123",
            "role": "client",
        }
        data[field] = value
        with pytest.raises(ValidationError):
            SignupRequest(**data)


class TestLogin:
    def _user(self, make_user, **fields):
        return make_user(password_hash=get_password_hash("secret123"), **fields)

    def test_login_returns_token_and_role(self, db_session, make_user):
        user = self._user(make_user, role="counselor")
        result = auth_api.login(LoginRequest(email=user.email, password="secret123"), db=db_session)
        assert result["role"] == "counselor"
        assert get_current_user(token=result["access_token"], db=db_session).id == user.id

    def test_wrong_password_is_invalid_credentials(self, db_session, make_user):
        user = self._user(make_user)
        with pytest.raises(HTTPException) as exc:
            auth_api.login(LoginRequest(email=user.email, password="wrong-pass"), db=db_session)
        assert exc.value.status_code == 400
        assert exc.value.detail == "Invalid credentials"

    def test_suspended_user_cannot_login(self, db_session, make_user):
        user = self._user(make_user, is_suspended=True)
        with pytest.raises(HTTPException) as exc:
            auth_api.login(LoginRequest(email=user.email, password="secret123"), db=db_session)
        assert exc.value.status_code == 403

    def test_admin_login_requires_admin_role(self, db_session, make_user):
        client = self._user(make_user)
        with pytest.raises(HTTPException) as exc:
            auth_api.admin_login(LoginRequest(email=client.email, password="secret123"), db=db_session)
        assert exc.value.status_code == 403

        admin = self._user(make_user, role="admin")
        result = auth_api.admin_login(LoginRequest(email=admin.email, password="secret123"), db=db_session)
        assert result["role"] == "admin"


class TestCurrentUser:
    def test_unknown_user_token_is_rejected(self, db_session):
        token = create_access_token({"sub": "999", "role": "client"})
        with pytest.raises(HTTPException) as exc:
            get_current_user(token=token, db=db_session)
        assert exc.value.status_code == 401

    def test_garbage_token_is_rejected(self, db_session):
        with pytest.raises(HTTPException) as exc:
            get_current_user(token="not-a-jwt", db=db_session)
        assert exc.value.status_code == 401

    def test_suspended_user_is_forbidden_on_every_request(self, db_session, make_user):
        user = make_user(is_suspended=True)
        with pytest.raises(HTTPException) as exc:
            get_current_user(token=create_user_token(user), db=db_session)
        assert exc.value.status_code == 403

    def test_require_role_guard(self, make_user):
        checker = require_role("admin")
        with pytest.raises(HTTPException) as exc:
            checker(current_user=make_user(role="client"))
        assert exc.value.status_code == 403

        admin = make_user(role="admin")
        assert checker(current_user=admin) is admin

    def test_me_merges_counselor_profile(self, db_session, make_user):
        counselor = make_user(role="counselor")
        db_session.add(models.Counselor(user_id=counselor.id, university="UNILAG", session_rate=80))
        db_session.commit()
        db_session.refresh(counselor)

        data = auth_api.me(current_user=counselor)
        assert data["role"] == "counselor"
        assert data["university"] == "UNILAG"
        assert data["session_rate"] == 80

    def test_me_for_client_has_no_profile_fields(self, make_user):
        data = auth_api.me(current_user=make_user(role="client", country="Nigeria"))
        assert data["country"] == "Nigeria"
        assert "session_rate" not in data


class TestPromoteAdmin:
    @pytest.fixture
    def script_db(self, db_session, monkeypatch):
        from sqlalchemy.orm import sessionmaker

        from quluub.scripts import promote_admin as script

        monkeypatch.setattr(script, "SessionLocal", sessionmaker(bind=db_session.get_bind()))
        return script

    def test_promotes_existing_user(self, db_session, make_user, script_db):
        user = make_user(is_suspended=True)
        assert script_db.main([user.email]) == 0
        db_session.expire_all()
        assert user.role == "admin"
        assert user.is_suspended is False

    def test_unknown_email_and_usage(self, script_db):
        assert script_db.main(["nobody@example.com"]) == 1
        assert script_db.main([]) == 2
