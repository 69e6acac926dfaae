from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from quincy.core.database import get_db
from quincy.core.security import get_current_user
from quincy.models.event_db.event_crud import get_active_event, upsert_rsvp
from quincy.models.event_db.event_db import Event
from quincy.models.user_db.user_db import User
from quincy.schemas.event.event_base import EventOut, RsvpOut
from quincy.services.progress import progress_broadcaster

event_router = APIRouter(prefix="/events", tags=["Events"])


def require_active_event(db: Session = Depends(get_db)) -> Event:
    event = get_active_event(db)
    if not event:
        raise HTTPException(status_code=404, detail="No active event")
    return event


@event_router.get("/active", response_model=EventOut)
def read_active_event(event: Event = Depends(require_active_event)):
    return event


@event_router.post("/active/rsvp", response_model=RsvpOut)
def rsvp_to_active_event(
    event: Event = Depends(require_active_event),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not current_user.onboarding_completed:
        raise HTTPException(status_code=403, detail="Complete onboarding first")

    rsvp = upsert_rsvp(db, event.id, current_user.id)
    logger.info("User {} is going to event {}", current_user.id, event.id)
    progress_broadcaster.refresh(db, current_user.id)
    return rsvp
