from typing import List, Optional

from sqlalchemy.orm import Session

from quluub import models
from quluub.models.user import ROLE_ADMIN, ROLE_COUNSELOR
from quluub.utils.security import get_password_hash


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_user(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: str,
    is_verified: bool = True,
) -> models.User:
    db_user = models.User(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=normalize_email(email),
        password_hash=get_password_hash(password),
        role=role,
        is_verified=is_verified,
    )
    db.add(db_user)
    db.flush()
    return db_user


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_counselor_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(
        models.User.id == user_id,
        models.User.role == ROLE_COUNSELOR,
    ).first()


def list_users(db: Session, role: Optional[str] = None) -> List[models.User]:
    query = db.query(models.User)
    if role:
        query = query.filter(models.User.role == role)
    return query.order_by(models.User.created_at.desc(), models.User.id.desc()).all()


def list_admins(db: Session) -> List[models.User]:
    return db.query(models.User).filter(models.User.role == ROLE_ADMIN).all()


def update_user(db: Session, user: models.User, data: dict) -> models.User:
    """Apply only the keys present in ``data``; None values are skipped."""
    for key, value in data.items():
        if value is None:
            continue
        setattr(user, key, value)
    db.flush()
    return user
