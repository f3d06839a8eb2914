"""Pytest bootstrap: settings for tests, project imports and shared fixtures."""

import os
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import pytest

# Settings are read at import time, so they must be in place first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_NOTIFICATIONS_ENABLED", "false")

# Ensure project root is on sys.path so `import quluub` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from quluub import models  # noqa: E402
from quluub.database import Base  # noqa: E402
from quluub.models.session import STATUS_PENDING_PAYMENT  # noqa: E402
from quluub.utils.dates import utcnow  # noqa: E402


# ======================
# TEST DATABASE SETUP
# ======================

@pytest.fixture
def db_session():
    """Create test database session"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def make_user(db_session):
    """Factory for users; password hashing is skipped unless a password is given."""
    counter = {"n": 0}

    def _make(role="client", first_name=None, password_hash="hash", **fields):
        counter["n"] += 1
        user = models.User(
            first_name=first_name or f"{role.title()}{counter['n']}",
            last_name="Tester",
            email=f"{role}{counter['n']}@example.com",
            password_hash=password_hash,
            role=role,
            is_verified=True,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_session(db_session):
    def _make(client, counselor, status=STATUS_PENDING_PAYMENT, price="50.00", currency="usd", **fields):
        session = models.Session(
            client_id=client.id,
            counselor_id=counselor.id,
            date=fields.pop("date", utcnow().replace(microsecond=0) + timedelta(days=1)),
            price=Decimal(price),
            currency=currency,
            status=status,
            **fields,
        )
        db_session.add(session)
        db_session.commit()
        db_session.refresh(session)
        return session

    return _make
