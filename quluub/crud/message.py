from typing import List

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from quluub import models


def create_message(db: Session, *, sender_id: int, receiver_id: int, content: str) -> models.Message:
    message = models.Message(sender_id=sender_id, receiver_id=receiver_id, content=content)
    db.add(message)
    db.flush()
    return message


def get_conversation(db: Session, user_a: int, user_b: int) -> List[models.Message]:
    """All messages exchanged between two users, oldest first."""
    return db.query(models.Message).filter(
        or_(
            and_(models.Message.sender_id == user_a, models.Message.receiver_id == user_b),
            and_(models.Message.sender_id == user_b, models.Message.receiver_id == user_a),
        )
    ).order_by(models.Message.timestamp.asc(), models.Message.id.asc()).all()


def list_user_messages(db: Session, user_id: int) -> List[models.Message]:
    """Every message the user sent or received, newest first."""
    return db.query(models.Message).filter(
        or_(models.Message.sender_id == user_id, models.Message.receiver_id == user_id)
    ).order_by(models.Message.timestamp.desc(), models.Message.id.desc()).all()
