from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from quluub import models
from quluub.models.user import ROLE_COUNSELOR


def get_profile(db: Session, user_id: int) -> Optional[models.Counselor]:
    return db.query(models.Counselor).filter(models.Counselor.user_id == user_id).first()


def get_or_create_profile(db: Session, user_id: int) -> models.Counselor:
    profile = get_profile(db, user_id)
    if profile is None:
        profile = models.Counselor(user_id=user_id, specializations=[], languages=[], availability={})
        db.add(profile)
        db.flush()
    return profile


def list_counselor_users(
    db: Session,
    *,
    visible_only: bool = True,
    approved_only: bool = False,
) -> List[models.User]:
    query = db.query(models.User).options(
        joinedload(models.User.counselor_profile)
    ).filter(models.User.role == ROLE_COUNSELOR)
    if visible_only:
        query = query.filter(models.User.is_visible.is_(True))
    if approved_only:
        query = query.join(models.Counselor, models.Counselor.user_id == models.User.id).filter(
            models.Counselor.is_approved.is_(True)
        )
    return query.order_by(models.User.id.asc()).all()
