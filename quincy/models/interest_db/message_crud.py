from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from quincy.core.errors import store_call
from quincy.models.interest_db.connection_db import Connection
from quincy.models.interest_db.message_db import Message


@store_call
def add_message(db: Session, connection: Connection, sender_id: UUID, content: str) -> Message:
    message = Message(connection_id=connection.id, sender_id=sender_id, content=content)
    db.add(message)
    db.flush()
    connection.last_activity_at = message.created_at or datetime.utcnow()
    db.commit()
    db.refresh(message)
    return message


@store_call
def list_messages(db: Session, connection_id: UUID, skip: int = 0, limit: int = 100) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.connection_id == connection_id)
        .order_by(Message.id.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )


@store_call
def last_message(db: Session, connection_id: UUID) -> Message | None:
    return (
        db.query(Message)
        .filter(Message.connection_id == connection_id)
        .order_by(Message.id.desc())
        .first()
    )
