from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from quincy.core.database import upsert_insert
from quincy.core.errors import store_call
from quincy.models.event_db.event_db import Event
from quincy.models.event_db.record_db import VinylRecord
from quincy.models.event_db.rsvp_db import Rsvp
from quincy.models.interest_db.interest_db import Interest


@store_call
def get_active_event(db: Session) -> Event | None:
    return (
        db.query(Event)
        .filter(Event.is_active.is_(True))
        .order_by(Event.starts_at.asc())
        .first()
    )


@store_call
def upsert_rsvp(db: Session, event_id: UUID, user_id: UUID, source: str = "quincy") -> Rsvp:
    stmt = upsert_insert(db, Rsvp.__table__).values(
        event_id=event_id, user_id=user_id, status="going", source=source
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["event_id", "user_id"],
        set_={"status": "going"},
    )
    db.execute(stmt)
    db.commit()
    return db.query(Rsvp).filter(Rsvp.event_id == event_id, Rsvp.user_id == user_id).one()


@store_call
def has_rsvp(db: Session, event_id: UUID, user_id: UUID) -> bool:
    return db.query(Rsvp.id).filter(
        Rsvp.event_id == event_id,
        Rsvp.user_id == user_id,
        Rsvp.status == "going",
    ).first() is not None


@store_call
def has_uploaded(db: Session, event_id: UUID, user_id: UUID) -> bool:
    return db.query(VinylRecord.id).filter(
        VinylRecord.event_id == event_id,
        VinylRecord.user_id == user_id,
    ).first() is not None


@store_call
def create_record(db: Session, event_id: UUID, user_id: UUID, album: str | None,
                  artist: str | None, image_path: str | None) -> VinylRecord:
    record = VinylRecord(
        event_id=event_id,
        user_id=user_id,
        typed_album=album,
        typed_artist=artist,
        image_path=image_path,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@store_call
def get_record(db: Session, record_id: UUID) -> VinylRecord | None:
    return db.query(VinylRecord).filter(VinylRecord.id == record_id).first()


@store_call
def list_wall(db: Session, event_id: UUID, skip: int = 0, limit: int = 50) -> List[VinylRecord]:
    return (
        db.query(VinylRecord)
        .filter(VinylRecord.event_id == event_id)
        .order_by(VinylRecord.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


@store_call
def discover_deck(db: Session, event_id: UUID, user_id: UUID) -> List[VinylRecord]:
    """First record of every other attendee the user has not vibed with yet."""
    seen = {
        row.receiver_id
        for row in db.query(Interest.receiver_id).filter(
            Interest.sender_id == user_id,
            Interest.event_id == event_id,
        )
    }
    seen.add(user_id)

    by_user = {}
    records = (
        db.query(VinylRecord)
        .filter(VinylRecord.event_id == event_id)
        .order_by(VinylRecord.created_at.asc())
        .all()
    )
    for record in records:
        if record.user_id in seen or record.user_id in by_user:
            continue
        by_user[record.user_id] = record
    return list(by_user.values())
