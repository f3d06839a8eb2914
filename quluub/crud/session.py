from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from quluub import models
from quluub.models.session import STATUS_PENDING_PAYMENT


def create_session(
    db: Session,
    *,
    client_id: int,
    counselor_id: int,
    date: datetime,
    price: Decimal,
    currency: str,
    duration: int = 60,
    notes: Optional[str] = None,
) -> models.Session:
    session = models.Session(
        client_id=client_id,
        counselor_id=counselor_id,
        date=date,
        duration=duration,
        price=price,
        currency=currency,
        status=STATUS_PENDING_PAYMENT,
        notes=notes,
    )
    db.add(session)
    db.flush()
    return session


def get_session(db: Session, session_id: int) -> Optional[models.Session]:
    return db.query(models.Session).filter(models.Session.id == session_id).first()


def get_by_checkout_id(db: Session, checkout_session_id: str) -> Optional[models.Session]:
    return db.query(models.Session).filter(
        models.Session.stripe_checkout_session_id == checkout_session_id
    ).first()


def list_for_client(db: Session, client_id: int) -> List[models.Session]:
    return db.query(models.Session).filter(
        models.Session.client_id == client_id
    ).order_by(models.Session.date.desc(), models.Session.id.desc()).all()


def list_for_counselor(db: Session, counselor_id: int) -> List[models.Session]:
    return db.query(models.Session).filter(
        models.Session.counselor_id == counselor_id
    ).order_by(models.Session.date.desc(), models.Session.id.desc()).all()


def list_all(db: Session, statuses: Optional[List[str]] = None) -> List[models.Session]:
    query = db.query(models.Session)
    if statuses:
        query = query.filter(models.Session.status.in_(statuses))
    return query.order_by(models.Session.date.desc(), models.Session.id.desc()).all()


def is_participant(session: models.Session, user_id: int) -> bool:
    return user_id in (session.client_id, session.counselor_id)

