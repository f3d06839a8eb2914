import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.schemas.social import ComplaintCreate
from quluub.services import notification_service
from quluub.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/complaints", tags=["Complaints"])


def serialize_complaint(complaint: models.Complaint) -> dict:
    return {
        "id": complaint.id,
        "reporter_id": complaint.reporter_id,
        "reporter_name": complaint.reporter.name if complaint.reporter else None,
        "reported_user_id": complaint.reported_user_id,
        "reported_user_name": complaint.reported_user.name if complaint.reported_user else None,
        "reason": complaint.reason,
        "description": complaint.description,
        "status": complaint.status,
        "created_at": complaint.created_at.isoformat() if complaint.created_at else None,
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
def file_complaint(
    payload: ComplaintCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    reason = payload.reason.strip()
    if not reason:
        raise HTTPException(status_code=400, detail="Reason is required")
    if payload.reported_user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot report yourself")
    reported = user_crud.get_user(db, payload.reported_user_id)
    if not reported:
        raise HTTPException(status_code=404, detail="Reported user not found")

    complaint = models.Complaint(
        reporter_id=current_user.id,
        reported_user_id=reported.id,
        reason=reason,
        description=(payload.description or "").strip() or None,
    )
    db.add(complaint)
    db.flush()
    notifications = notification_service.notify_admins(
        db,
        actor_id=current_user.id,
        event_type="complaint_filed",
        message=f"{current_user.name} filed a complaint against {reported.name}: {reason}",
    )
    db.commit()
    db.refresh(complaint)

    notification_service.dispatch_emails(db, notifications)
    logger.info("Complaint %s filed by user %s", complaint.id, current_user.id)
    return serialize_complaint(complaint)
