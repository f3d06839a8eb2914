# quluub/api/admin.py
"""
Admin endpoints: dashboard overview, user management, session and
transaction oversight, complaints, and chat review.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from quluub.api.complaints import serialize_complaint
from quluub.api.messages import serialize_message
from quluub.crud import counselor as counselor_crud
from quluub.crud import message as message_crud
from quluub.crud import session as session_crud
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.models.complaint import COMPLAINT_STATUSES, Complaint
from quluub.models.session import (
    STATUS_CANCELED,
    STATUS_COMPLETED,
    STATUS_PAID,
    Session as SessionModel,
)
from quluub.models.user import ROLE_ADMIN, ROLE_CLIENT, ROLE_COUNSELOR, ROLES, User
from quluub.schemas.social import ComplaintStatusUpdate
from quluub.schemas.user import AdminUserUpdate
from quluub.services.session_service import serialize_session
from quluub.utils.security import require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

require_admin = require_role(ROLE_ADMIN)


def fmt_user(u: User) -> dict:
    return {
        "id": u.id,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "is_verified": u.is_verified,
        "is_suspended": u.is_suspended,
        "onboarding_completed": u.onboarding_completed,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = user_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ─────────────────────────────────────────
# GET /admin/dashboard-overview
# ─────────────────────────────────────────
@router.get("/dashboard-overview")
def get_dashboard_overview(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    total_clients = db.query(User).filter(User.role == ROLE_CLIENT).count()
    total_counselors = db.query(User).filter(User.role == ROLE_COUNSELOR).count()

    status_counts = dict(
        db.query(SessionModel.status, func.count(SessionModel.id))
        .group_by(SessionModel.status)
        .all()
    )

    revenue_rows = (
        db.query(SessionModel.currency, func.sum(SessionModel.price))
        .filter(SessionModel.status == STATUS_COMPLETED)
        .group_by(SessionModel.currency)
        .all()
    )

    session_count = func.count(SessionModel.id).label("session_count")
    top_counselors = (
        db.query(User.id, User.first_name, User.last_name, session_count)
        .join(SessionModel, SessionModel.counselor_id == User.id)
        .filter(SessionModel.status == STATUS_COMPLETED)
        .group_by(User.id, User.first_name, User.last_name)
        .order_by(desc(session_count), User.id)
        .limit(5)
        .all()
    )

    pending_complaints = db.query(Complaint).filter(Complaint.status == "pending").count()

    return {
        "user_stats": {
            "total_clients": total_clients,
            "total_counselors": total_counselors,
        },
        "session_stats": {
            "completed": status_counts.get(STATUS_COMPLETED, 0),
            "ongoing": status_counts.get(STATUS_PAID, 0),
            "canceled": status_counts.get(STATUS_CANCELED, 0),
        },
        "revenue": {currency: total for currency, total in revenue_rows},
        "most_active_counselors": [
            {
                "counselor_id": row.id,
                "name": f"{row.first_name} {row.last_name}".strip(),
                "session_count": row.session_count,
            }
            for row in top_counselors
        ],
        "pending_complaints": pending_complaints,
    }


# ─────────────────────────────────────────
# Users
# ─────────────────────────────────────────
@router.get("/users")
def get_all_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return [fmt_user(u) for u in user_crud.list_users(db, role=role)]


@router.put("/users/{user_id}")
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _get_user_or_404(db, user_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("role") is not None and data["role"] not in ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")
    if data.get("email"):
        data["email"] = user_crud.normalize_email(data["email"])
        existing = user_crud.get_user_by_email(db, data["email"])
        if existing and existing.id != user.id:
            raise HTTPException(status_code=400, detail="Email already in use")

    user_crud.update_user(db, user, data)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s updated user %s", admin.id, user.id)
    return fmt_user(user)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _get_user_or_404(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return {"message": "User removed"}


@router.put("/users/{user_id}/verify")
def verify_counselor(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _get_user_or_404(db, user_id)
    if user.role != ROLE_COUNSELOR:
        raise HTTPException(status_code=400, detail="This action is only applicable to counselors")

    user.is_verified = True
    db.commit()
    db.refresh(user)
    return fmt_user(user)


@router.put("/users/{user_id}/suspend")
def toggle_suspension(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _get_user_or_404(db, user_id)
    if user.role == ROLE_ADMIN:
        raise HTTPException(status_code=400, detail="Admins cannot be suspended")

    user.is_suspended = not user.is_suspended
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set suspended=%s for user %s", admin.id, user.is_suspended, user.id)
    return fmt_user(user)


@router.put("/counselors/{user_id}/approve")
def approve_counselor(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _get_user_or_404(db, user_id)
    if user.role != ROLE_COUNSELOR:
        raise HTTPException(status_code=400, detail="This action is only applicable to counselors")

    profile = counselor_crud.get_or_create_profile(db, user.id)
    profile.is_approved = True
    db.commit()
    return {"message": "Counselor approved", "user_id": user.id, "is_approved": True}


# ─────────────────────────────────────────
# Sessions & transactions
# ─────────────────────────────────────────
@router.get("/sessions")
def get_all_sessions(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return [serialize_session(s) for s in session_crud.list_all(db)]


@router.get("/transactions")
def get_transactions(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Sessions that have been paid for."""
    sessions = session_crud.list_all(db, statuses=[STATUS_PAID, STATUS_COMPLETED])
    return [serialize_session(s) for s in sessions]


# ─────────────────────────────────────────
# Complaints
# ─────────────────────────────────────────
@router.get("/complaints")
def get_complaints(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    complaints = db.query(Complaint).order_by(desc(Complaint.created_at), desc(Complaint.id)).all()
    return [serialize_complaint(c) for c in complaints]


@router.put("/complaints/{complaint_id}/status")
def update_complaint_status(
    complaint_id: int,
    payload: ComplaintStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    if payload.status not in COMPLAINT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status provided.")

    complaint = db.query(Complaint).filter(Complaint.id == complaint_id).first()
    if not complaint:
        raise HTTPException(status_code=404, detail="Complaint not found")

    complaint.status = payload.status
    db.commit()
    db.refresh(complaint)
    return serialize_complaint(complaint)


# ─────────────────────────────────────────
# Chat review
# ─────────────────────────────────────────
@router.get("/chat/{user1_id}/{user2_id}")
def get_chat_between(
    user1_id: int,
    user2_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return [serialize_message(m) for m in message_crud.get_conversation(db, user1_id, user2_id)]
