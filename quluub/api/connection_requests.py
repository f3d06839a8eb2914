from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.models.request import REQUEST_ACCEPTED, REQUEST_DECLINED, REQUEST_PENDING
from quluub.models.user import ROLE_COUNSELOR
from quluub.schemas.social import ConnectionRequestCreate, ConnectionRequestUpdate
from quluub.services import notification_service
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/requests", tags=["Requests"])


def _serialize(request: models.ConnectionRequest) -> dict:
    return {
        "id": request.id,
        "client_id": request.client_id,
        "client_name": request.client.name if request.client else None,
        "counselor_id": request.counselor_id,
        "status": request.status,
        "created_at": request.created_at.isoformat() if request.created_at else None,
    }


@router.post("/")
def send_request(
    payload: ConnectionRequestCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not user_crud.get_counselor_user(db, payload.counselor_id):
        raise HTTPException(status_code=404, detail="Counselor not found")

    existing = db.query(models.ConnectionRequest).filter(
        models.ConnectionRequest.client_id == current_user.id,
        models.ConnectionRequest.counselor_id == payload.counselor_id
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="Request already sent")

    request = models.ConnectionRequest(
        client_id=current_user.id,
        counselor_id=payload.counselor_id,
        status=REQUEST_PENDING
    )
    db.add(request)
    db.flush()
    notification = notification_service.create_notification(
        db,
        recipient_id=payload.counselor_id,
        actor_id=current_user.id,
        session_id=None,
        event_type="request_received",
        message=f"{current_user.name} wants to connect with you."
    )
    db.commit()
    db.refresh(request)

    notification_service.dispatch_email_for_notification(db, notification)
    return _serialize(request)


@router.get("/")
def get_pending_requests(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role != ROLE_COUNSELOR:
        raise HTTPException(status_code=403, detail="User is not a counselor")

    requests = db.query(models.ConnectionRequest).filter(
        models.ConnectionRequest.counselor_id == current_user.id,
        models.ConnectionRequest.status == REQUEST_PENDING
    ).order_by(models.ConnectionRequest.created_at.desc(), models.ConnectionRequest.id.desc()).all()
    return [_serialize(r) for r in requests]


@router.put("/{request_id}")
def respond_to_request(
    request_id: int,
    payload: ConnectionRequestUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    request = db.query(models.ConnectionRequest).filter(
        models.ConnectionRequest.id == request_id
    ).first()
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    if request.counselor_id != current_user.id:
        raise HTTPException(status_code=401, detail="User not authorized")

    new_status = (payload.status or "").strip().lower()
    if new_status not in (REQUEST_ACCEPTED, REQUEST_DECLINED):
        raise HTTPException(status_code=400, detail="Invalid status")

    request.status = new_status
    notification = notification_service.create_notification(
        db,
        recipient_id=request.client_id,
        actor_id=current_user.id,
        session_id=None,
        event_type="request_updated",
        message=f"{current_user.name} {new_status} your connection request."
    )
    db.commit()
    db.refresh(request)

    notification_service.dispatch_email_for_notification(db, notification)
    return _serialize(request)
