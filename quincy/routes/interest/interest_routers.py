from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quincy.core.config import settings
from quincy.core.database import get_db
from quincy.core.errors import NotFoundError
from quincy.core.security import get_current_user
from quincy.models.event_db.event_crud import get_active_event, has_uploaded
from quincy.models.event_db.event_db import Event
from quincy.models.interest_db.interest_crud import list_interests_for
from quincy.models.interest_db.message_crud import last_message
from quincy.models.user_db.user_db import User
from quincy.models.user_db.user_db_crud import get_user_by_id
from quincy.routes.event.event_routers import require_active_event
from quincy.schemas.interest.interest_base import (
    ConnectionSummaryOut,
    InterestCreate,
    InterestOut,
    InterestRespond,
    InterestResultOut,
    MessageCreate,
    MessageOut,
)
from quincy.services.chat import get_messages, post_message
from quincy.services.interest_ledger import InterestLedger, InterestResult
from quincy.services.notifier import build_notifier

interest_router = APIRouter(prefix="/interests", tags=["Interests"])
connection_router = APIRouter(prefix="/connections", tags=["Connections"])

_notifier = build_notifier(settings.NOTIFIER)


def get_notifier():
    return _notifier


def get_ledger(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier)
) -> InterestLedger:
    return InterestLedger(db, notifier, dispatch=background_tasks.add_task)


def _result_out(result: InterestResult) -> dict:
    return {
        "interest": result.interest,
        "created": result.created,
        "matched": result.connection is not None,
        "connection": result.connection,
    }


@interest_router.post("/", response_model=InterestResultOut)
def express_interest(
    payload: InterestCreate,
    event: Event = Depends(require_active_event),
    ledger: InterestLedger = Depends(get_ledger),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not has_uploaded(db, event.id, current_user.id):
        raise HTTPException(status_code=403, detail="Upload a record before sending vibes")

    result = ledger.express_interest(current_user.id, payload.receiver_id, payload.subject_id, event_id=event.id)
    return _result_out(result)


@interest_router.post("/{interest_id}/respond", response_model=InterestResultOut)
def respond_to_interest(
    interest_id: UUID,
    payload: InterestRespond,
    ledger: InterestLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user)
):
    result = ledger.respond_to_interest(interest_id, current_user.id, payload.decision)
    return _result_out(result)


@interest_router.get("/incoming", response_model=list[InterestOut])
def incoming_interests(
    status: str | None = Query(None, pattern="^(pending|accepted|declined)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    event = get_active_event(db)
    if not event:
        raise NotFoundError("No active event")
    return list_interests_for(db, current_user.id, event.id, incoming=True, status=status)


@connection_router.get("/", response_model=list[ConnectionSummaryOut])
def my_connections(
    ledger: InterestLedger = Depends(get_ledger),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    summaries = []
    for connection in ledger.list_connections_for(current_user.id):
        other = get_user_by_id(db, connection.other_party(current_user.id))
        latest = last_message(db, connection.id)
        summaries.append({
            "connection": connection,
            "other": other or {"id": connection.other_party(current_user.id)},
            "last_message": latest.content if latest else None,
            "last_message_at": latest.created_at if latest else None,
        })
    return summaries


@connection_router.get("/{connection_id}/messages", response_model=list[MessageOut])
def read_messages(
    connection_id: UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_messages(db, connection_id, current_user.id, skip=skip, limit=limit)


@connection_router.post("/{connection_id}/messages", response_model=MessageOut, status_code=201)
def send_message(
    connection_id: UUID,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return post_message(db, connection_id, current_user.id, payload.content)
