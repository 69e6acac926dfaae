"""
Directed interest ("vibes") between attendees and the connections they form.

One row per (sender, receiver, event). Mutual interest is detected by looking
up the swapped pair after the sender's own row has been committed, so of two
simultaneous reciprocal sends at least one sees the other. The connection
insert is an ON CONFLICT DO NOTHING on the canonical pair, so only one row is
ever created and only the call that created it sends notifications.

Policy for closed pairs: once either direction is declined the pair stays
closed for that event. A later send in the other direction is stored as
declined and never forms a connection.

Both parties must have RSVP'd to the event the interest is scoped to.
Notifications go through `dispatch`, which runs them inline by default; the
HTTP layer passes FastAPI's `BackgroundTasks.add_task` so delivery happens
after the response is sent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List
from uuid import UUID

from loguru import logger
from sqlalchemy.orm import Session

from quincy.core.errors import NotFoundError, ValidationError
from quincy.models.event_db.event_crud import get_active_event, get_record, has_rsvp
from quincy.models.interest_db.connection_db import Connection
from quincy.models.interest_db.interest_crud import (
    get_interest,
    get_interest_by_id,
    insert_interest,
    list_connections,
    set_interest_status,
    upsert_connection,
)
from quincy.models.interest_db.interest_db import Interest
from quincy.models.user_db.user_db_crud import get_user_by_id
from quincy.services.notifier import ConnectionNotifier, LoggingNotifier, notify_safely


class InterestStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


TERMINAL_STATUSES = {InterestStatus.accepted.value, InterestStatus.declined.value}


@dataclass
class InterestResult:
    interest: Interest
    created: bool
    connection: Connection | None = None

    @property
    def status(self) -> str:
        return self.interest.status


def deliver_now(func: Callable[..., Any], *args) -> None:
    func(*args)


class InterestLedger:
    def __init__(self, db: Session, notifier: ConnectionNotifier | None = None,
                 dispatch: Callable[..., Any] | None = None):
        self.db = db
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self.dispatch = dispatch if dispatch is not None else deliver_now

    def _resolve_event_id(self, event_id: UUID | None) -> UUID:
        if event_id is not None:
            return event_id
        event = get_active_event(self.db)
        if not event:
            raise NotFoundError("No active event")
        return event.id

    def _materialize(self, user1_id: UUID, user2_id: UUID, event_id: UUID) -> Connection:
        connection, created = upsert_connection(self.db, user1_id, user2_id, event_id)
        if created:
            logger.info("Connection {} formed between {} and {}", connection.id, user1_id, user2_id)
            for recipient_id in (connection.user_a, connection.user_b):
                self.dispatch(notify_safely, self.notifier, connection, recipient_id)
        return connection

    def express_interest(self, sender_id: UUID, receiver_id: UUID,
                         subject_id: UUID | None = None, event_id: UUID | None = None) -> InterestResult:
        if not sender_id or not receiver_id:
            raise ValidationError("sender_id and receiver_id are required")
        if sender_id == receiver_id:
            raise ValidationError("Cannot express interest in yourself", user_id=str(sender_id))

        event_id = self._resolve_event_id(event_id)

        if not get_user_by_id(self.db, sender_id):
            raise NotFoundError("Sender not found", sender_id=str(sender_id))
        if not get_user_by_id(self.db, receiver_id):
            raise NotFoundError("Receiver not found", receiver_id=str(receiver_id))
        for role, user_id in (("Sender", sender_id), ("Receiver", receiver_id)):
            if not has_rsvp(self.db, event_id, user_id):
                raise ValidationError(f"{role} is not attending this event",
                                      user_id=str(user_id), event_id=str(event_id))
        if subject_id is not None:
            record = get_record(self.db, subject_id)
            if not record or record.user_id != receiver_id or record.event_id != event_id:
                raise NotFoundError("Record not found for receiver", subject_id=str(subject_id))

        interest, created = insert_interest(self.db, sender_id, receiver_id, event_id, subject_id)
        if not created:
            logger.debug("Interest {} -> {} already recorded ({})", sender_id, receiver_id, interest.status)

        if interest.status == InterestStatus.declined:
            return InterestResult(interest=interest, created=created)

        reciprocal = get_interest(self.db, receiver_id, sender_id, event_id)
        if reciprocal is None:
            return InterestResult(interest=interest, created=created)

        if reciprocal.status == InterestStatus.declined:
            interest = set_interest_status(self.db, interest, InterestStatus.declined.value)
            return InterestResult(interest=interest, created=created)

        # Sending back is the receiver accepting the reciprocal row.
        if reciprocal.status != InterestStatus.accepted:
            set_interest_status(self.db, reciprocal, InterestStatus.accepted.value)
        if interest.status != InterestStatus.accepted:
            interest = set_interest_status(self.db, interest, InterestStatus.accepted.value)

        connection = self._materialize(sender_id, receiver_id, event_id)
        return InterestResult(interest=interest, created=created, connection=connection)

    def respond_to_interest(self, interest_id: UUID, receiver_id: UUID, decision: str) -> InterestResult:
        if not interest_id or not receiver_id:
            raise ValidationError("interest_id and receiver_id are required")
        if decision not in TERMINAL_STATUSES:
            raise ValidationError(f"Invalid decision: {decision}")

        interest = get_interest_by_id(self.db, interest_id)
        if not interest or interest.receiver_id != receiver_id:
            raise NotFoundError("Interest not found", interest_id=str(interest_id))

        if interest.status != InterestStatus.pending:
            logger.debug("Interest {} already {}, ignoring {}", interest.id, interest.status, decision)
            return InterestResult(interest=interest, created=False)

        interest = set_interest_status(self.db, interest, InterestStatus(decision).value)
        if interest.status == InterestStatus.declined:
            return InterestResult(interest=interest, created=False)

        connection = self._materialize(interest.sender_id, interest.receiver_id, interest.event_id)
        return InterestResult(interest=interest, created=False, connection=connection)

    def list_connections_for(self, user_id: UUID, event_id: UUID | None = None) -> List[Connection]:
        if not user_id:
            raise ValidationError("user_id is required")
        return list_connections(self.db, user_id, event_id)
