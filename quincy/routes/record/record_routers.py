from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy.orm import Session

from quincy.core.database import get_db
from quincy.core.security import get_current_user
from quincy.models.event_db.event_crud import (
    create_record,
    discover_deck,
    get_record,
    has_rsvp,
    has_uploaded,
    list_wall,
)
from quincy.models.event_db.event_db import Event
from quincy.models.event_db.record_db import VinylRecord
from quincy.models.user_db.user_db import User
from quincy.models.user_db.user_db_crud import get_user_by_id
from quincy.routes.event.event_routers import require_active_event
from quincy.schemas.common.page_response import PageResponse
from quincy.schemas.record.record_base import DeckCardOut, RecordCreate, RecordOut
from quincy.services.album_summary import AlbumSummary, AlbumSummaryService
from quincy.services.progress import progress_broadcaster

record_router = APIRouter(prefix="/records", tags=["Records"])

_summarizer = AlbumSummaryService()


def get_album_summarizer() -> AlbumSummaryService:
    return _summarizer


@record_router.post("/", response_model=RecordOut, status_code=201)
def upload_record(
    payload: RecordCreate,
    event: Event = Depends(require_active_event),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not has_rsvp(db, event.id, current_user.id):
        raise HTTPException(status_code=403, detail="RSVP to the event before uploading a record")

    record = create_record(
        db,
        event_id=event.id,
        user_id=current_user.id,
        album=payload.album,
        artist=payload.artist,
        image_path=payload.image_path,
    )
    logger.info("User {} uploaded record {}", current_user.id, record.id)
    progress_broadcaster.refresh(db, current_user.id)
    return record


@record_router.get("/", response_model=PageResponse[RecordOut])
def vinyl_wall(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    event: Event = Depends(require_active_event),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    skip = (page - 1) * size
    total = db.query(VinylRecord).filter(VinylRecord.event_id == event.id).count()
    records = list_wall(db, event.id, skip=skip, limit=size)

    return PageResponse[RecordOut](
        page=page,
        size=size,
        total=total,
        has_next=(page * size) < total,
        has_prev=page > 1,
        items=records
    )


@record_router.get("/deck", response_model=list[DeckCardOut])
def discover(
    event: Event = Depends(require_active_event),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not has_uploaded(db, event.id, current_user.id):
        raise HTTPException(status_code=403, detail="Upload a record to unlock discover")

    cards = []
    for record in discover_deck(db, event.id, current_user.id):
        owner = get_user_by_id(db, record.user_id)
        if owner:
            cards.append({"record": record, "owner": owner})
    return cards


@record_router.get("/{record_id}", response_model=RecordOut)
def read_record(
    record_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = get_record(db, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    return record


@record_router.get("/{record_id}/summary", response_model=AlbumSummary)
def album_summary(
    record_id: UUID,
    db: Session = Depends(get_db),
    summarizer: AlbumSummaryService = Depends(get_album_summarizer),
    current_user: User = Depends(get_current_user)
):
    record = get_record(db, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    return summarizer.summarize(record.typed_album, record.typed_artist)
