from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import message as message_crud
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.schemas.social import MessageCreate
from quluub.services import notification_service
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/messages", tags=["Messages"])


def serialize_message(message: models.Message) -> dict:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "content": message.content,
        "is_read": message.is_read,
        "timestamp": message.timestamp.isoformat() if message.timestamp else None,
    }


@router.get("/")
def list_conversations(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """One entry per conversation partner with the latest message, newest first."""
    conversations = {}
    for message in message_crud.list_user_messages(db, current_user.id):
        partner = message.receiver if message.sender_id == current_user.id else message.sender
        if partner is None or partner.id in conversations:
            continue
        conversations[partner.id] = {
            "with_user": {
                "id": partner.id,
                "first_name": partner.first_name,
                "last_name": partner.last_name,
                "role": partner.role,
            },
            "last_message": serialize_message(message),
        }
    return list(conversations.values())


@router.get("/{user_id}")
def get_chat_history(
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    messages = message_crud.get_conversation(db, current_user.id, user_id)

    unread = [m for m in messages if m.receiver_id == current_user.id and not m.is_read]
    for m in unread:
        m.is_read = True
    if unread:
        db.commit()

    return [serialize_message(m) for m in messages]


@router.post("/", status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message content is required")
    if not user_crud.get_user(db, payload.receiver_id):
        raise HTTPException(status_code=404, detail="Receiver not found")

    message = message_crud.create_message(
        db,
        sender_id=current_user.id,
        receiver_id=payload.receiver_id,
        content=content,
    )
    notification = notification_service.create_notification(
        db,
        recipient_id=payload.receiver_id,
        actor_id=current_user.id,
        session_id=None,
        event_type="message_received",
        message=f"New message from {current_user.name}."
    )
    db.commit()
    db.refresh(message)

    notification_service.dispatch_email_for_notification(db, notification)
    return serialize_message(message)
