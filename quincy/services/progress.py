"""
Funnel progress of a user: authenticated -> onboarded -> RSVP'd -> uploaded.

Progress is always computed from the store for the active event and never
cached between requests. Resolution has a single bounded timeout; anything
that does not resolve in time is treated as unauthenticated.
"""

import asyncio
import threading
from collections import defaultdict
from enum import Enum
from typing import Callable
from uuid import UUID

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.orm import Session

from quincy.core.config import settings
from quincy.core.database import SessionLocal
from quincy.core.errors import TransientStoreError
from quincy.models.event_db.event_crud import get_active_event, has_rsvp, has_uploaded
from quincy.models.user_db.user_db_crud import get_user_by_id


class ProgressModel(BaseModel):
    authenticated: bool = False
    onboarding_complete: bool = False
    has_rsvp: bool = False
    has_uploaded: bool = False

    class Config:
        frozen = True

    @classmethod
    def anonymous(cls) -> "ProgressModel":
        return cls()


class ProgressState(str, Enum):
    loading = "loading"
    resolved = "resolved"
    unauthenticated = "unauthenticated"


class ProgressSnapshot(BaseModel):
    state: ProgressState
    progress: ProgressModel | None = None

    class Config:
        frozen = True

    @classmethod
    def loading(cls) -> "ProgressSnapshot":
        return cls(state=ProgressState.loading)

    @classmethod
    def unauthenticated(cls) -> "ProgressSnapshot":
        return cls(state=ProgressState.unauthenticated, progress=ProgressModel.anonymous())

    @classmethod
    def resolved(cls, progress: ProgressModel) -> "ProgressSnapshot":
        return cls(state=ProgressState.resolved, progress=progress)


def load_progress(db: Session, user_id: UUID | None) -> ProgressSnapshot:
    if user_id is None:
        return ProgressSnapshot.unauthenticated()

    user = get_user_by_id(db, user_id)
    if not user:
        return ProgressSnapshot.unauthenticated()

    event = get_active_event(db)
    rsvp = bool(event) and has_rsvp(db, event.id, user.id)
    uploaded = bool(event) and has_uploaded(db, event.id, user.id)

    return ProgressSnapshot.resolved(ProgressModel(
        authenticated=True,
        onboarding_complete=bool(user.onboarding_completed),
        has_rsvp=rsvp,
        has_uploaded=uploaded,
    ))


class ProgressResolver:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal, timeout: float | None = None):
        self.session_factory = session_factory
        self.timeout = settings.PROGRESS_TIMEOUT_SECONDS if timeout is None else timeout

    def _load(self, user_id: UUID) -> ProgressSnapshot:
        db = self.session_factory()
        try:
            return load_progress(db, user_id)
        finally:
            db.close()

    async def resolve(self, user_id: UUID | None) -> ProgressSnapshot:
        if user_id is None:
            return ProgressSnapshot.unauthenticated()
        try:
            return await asyncio.wait_for(asyncio.to_thread(self._load, user_id), self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Progress resolution timed out after {}s for user {}", self.timeout, user_id)
        except TransientStoreError as e:
            logger.warning("Progress resolution failed for user {}: {}", user_id, e)
        return ProgressSnapshot.unauthenticated()


class Subscription:
    def __init__(self, broadcaster: "ProgressBroadcaster", user_id: UUID, callback):
        self._broadcaster = broadcaster
        self.user_id = user_id
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        if self.active:
            self._broadcaster._remove(self)
            self.active = False


class ProgressBroadcaster:
    """Pushes a fresh snapshot to subscribers whenever a user's progress changes."""

    def __init__(self):
        self._subscribers = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, user_id: UUID, callback: Callable[[ProgressSnapshot], None]) -> Subscription:
        subscription = Subscription(self, user_id, callback)
        with self._lock:
            self._subscribers[user_id].append(subscription)
        return subscription

    def _remove(self, subscription: Subscription):
        with self._lock:
            subscribers = self._subscribers.get(subscription.user_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscribers.pop(subscription.user_id, None)

    def has_subscribers(self, user_id: UUID) -> bool:
        with self._lock:
            return bool(self._subscribers.get(user_id))

    def publish(self, user_id: UUID, snapshot: ProgressSnapshot):
        with self._lock:
            subscribers = list(self._subscribers.get(user_id, []))
        for subscription in subscribers:
            try:
                subscription.callback(snapshot)
            except Exception as e:
                logger.error("Progress subscriber failed for user {}: {}", user_id, e)

    def refresh(self, db: Session, user_id: UUID):
        """Re-read progress from the store and publish it, if anyone listens."""
        if self.has_subscribers(user_id):
            self.publish(user_id, load_progress(db, user_id))


progress_broadcaster = ProgressBroadcaster()


async def progress_events(broadcaster: ProgressBroadcaster, user_id: UUID, initial: ProgressSnapshot):
    """Yield `initial`, then every snapshot published for the user until closed.

    Publishers run on worker threads, so snapshots are handed to this loop
    with `call_soon_threadsafe`.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    subscription = broadcaster.subscribe(
        user_id, lambda snapshot: loop.call_soon_threadsafe(queue.put_nowait, snapshot)
    )
    try:
        yield initial
        while True:
            yield await queue.get()
    finally:
        subscription.unsubscribe()
