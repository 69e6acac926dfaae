from datetime import datetime
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from quincy.core.database import upsert_insert
from quincy.core.errors import store_call
from quincy.models.interest_db.connection_db import Connection
from quincy.models.interest_db.interest_db import Interest


def canonical_pair(user1_id: UUID, user2_id: UUID) -> Tuple[UUID, UUID]:
    return (user1_id, user2_id) if user1_id < user2_id else (user2_id, user1_id)


@store_call
def get_interest(db: Session, sender_id: UUID, receiver_id: UUID, event_id: UUID) -> Interest | None:
    return db.query(Interest).filter(
        Interest.sender_id == sender_id,
        Interest.receiver_id == receiver_id,
        Interest.event_id == event_id,
    ).first()


@store_call
def get_interest_by_id(db: Session, interest_id: UUID) -> Interest | None:
    return db.query(Interest).filter(Interest.id == interest_id).first()


@store_call
def insert_interest(db: Session, sender_id: UUID, receiver_id: UUID, event_id: UUID,
                    subject_id: UUID | None, status: str = "pending") -> Tuple[Interest, bool]:
    """Insert the directed row unless it exists; returns (row, created).

    The insert is committed before returning so a concurrent reciprocal
    sender is guaranteed to see it.
    """
    stmt = upsert_insert(db, Interest.__table__).values(
        sender_id=sender_id,
        receiver_id=receiver_id,
        event_id=event_id,
        subject_id=subject_id,
        status=status,
    ).on_conflict_do_nothing(index_elements=["sender_id", "receiver_id", "event_id"])

    result = db.execute(stmt)
    db.commit()
    created = result.rowcount == 1

    return get_interest(db, sender_id, receiver_id, event_id), created


@store_call
def set_interest_status(db: Session, interest: Interest, status: str) -> Interest:
    interest.status = status
    interest.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(interest)
    return interest


@store_call
def get_connection(db: Session, connection_id: UUID) -> Connection | None:
    return db.query(Connection).filter(Connection.id == connection_id).first()


@store_call
def get_connection_for_pair(db: Session, user1_id: UUID, user2_id: UUID, event_id: UUID) -> Connection | None:
    user_a, user_b = canonical_pair(user1_id, user2_id)
    return db.query(Connection).filter(
        Connection.user_a == user_a,
        Connection.user_b == user_b,
        Connection.event_id == event_id,
    ).first()


@store_call
def upsert_connection(db: Session, user1_id: UUID, user2_id: UUID, event_id: UUID) -> Tuple[Connection, bool]:
    user_a, user_b = canonical_pair(user1_id, user2_id)
    stmt = upsert_insert(db, Connection.__table__).values(
        user_a=user_a, user_b=user_b, event_id=event_id
    ).on_conflict_do_nothing(index_elements=["user_a", "user_b", "event_id"])

    result = db.execute(stmt)
    db.commit()
    return get_connection_for_pair(db, user_a, user_b, event_id), result.rowcount == 1


@store_call
def list_connections(db: Session, user_id: UUID, event_id: UUID | None = None) -> List[Connection]:
    query = db.query(Connection).filter(
        or_(Connection.user_a == user_id, Connection.user_b == user_id)
    )
    if event_id is not None:
        query = query.filter(Connection.event_id == event_id)
    return query.order_by(Connection.last_activity_at.desc(), Connection.created_at.desc()).all()


@store_call
def list_interests_for(db: Session, user_id: UUID, event_id: UUID, incoming: bool = True,
                       status: str | None = None) -> List[Interest]:
    column = Interest.receiver_id if incoming else Interest.sender_id
    query = db.query(Interest).filter(column == user_id, Interest.event_id == event_id)
    if status:
        query = query.filter(Interest.status == status)
    return query.order_by(Interest.created_at.desc()).all()
