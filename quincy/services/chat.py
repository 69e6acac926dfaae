from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from quincy.core.errors import NotFoundError, ValidationError
from quincy.models.interest_db.connection_db import Connection
from quincy.models.interest_db.interest_crud import get_connection
from quincy.models.interest_db.message_crud import add_message, list_messages
from quincy.models.interest_db.message_db import Message

MAX_MESSAGE_LENGTH = 2000


def get_connection_for_member(db: Session, connection_id: UUID, user_id: UUID) -> Connection:
    connection = get_connection(db, connection_id)
    if not connection or not connection.involves(user_id):
        raise NotFoundError("Connection not found", connection_id=str(connection_id))
    return connection


def post_message(db: Session, connection_id: UUID, sender_id: UUID, content: str) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message is longer than {MAX_MESSAGE_LENGTH} characters")

    connection = get_connection_for_member(db, connection_id, sender_id)
    return add_message(db, connection, sender_id, content)


def get_messages(db: Session, connection_id: UUID, user_id: UUID,
                 skip: int = 0, limit: int = 100) -> List[Message]:
    get_connection_for_member(db, connection_id, user_id)
    return list_messages(db, connection_id, skip=skip, limit=limit)
