import asyncio
import time
import uuid

from quincy.core.errors import TransientStoreError
from quincy.models.event_db.record_db import VinylRecord
from quincy.models.event_db.rsvp_db import Rsvp
from quincy.services.progress import (
    ProgressBroadcaster,
    ProgressModel,
    ProgressResolver,
    ProgressSnapshot,
    ProgressState,
    load_progress,
    progress_events,
)


def test_anonymous_user_is_unauthenticated(db):
    snapshot = load_progress(db, None)
    assert snapshot.state is ProgressState.unauthenticated
    assert snapshot.progress == ProgressModel.anonymous()


def test_deleted_user_is_unauthenticated(db):
    assert load_progress(db, uuid.uuid4()).state is ProgressState.unauthenticated


def test_progress_follows_the_funnel(db, make_user, active_event):
    user = make_user(onboarded=False)
    assert load_progress(db, user.id).progress == ProgressModel(authenticated=True)

    user.onboarding_completed = True
    db.commit()
    assert load_progress(db, user.id).progress == ProgressModel(
        authenticated=True, onboarding_complete=True
    )

    db.add(Rsvp(event_id=active_event.id, user_id=user.id, status="going"))
    db.commit()
    assert load_progress(db, user.id).progress.has_rsvp is True

    db.add(VinylRecord(event_id=active_event.id, user_id=user.id, typed_album="Head Hunters"))
    db.commit()
    snapshot = load_progress(db, user.id)
    assert snapshot.state is ProgressState.resolved
    assert snapshot.progress == ProgressModel(
        authenticated=True, onboarding_complete=True, has_rsvp=True, has_uploaded=True
    )


def test_cancelled_rsvp_does_not_count(db, make_user, active_event):
    user = make_user()
    db.add(Rsvp(event_id=active_event.id, user_id=user.id, status="cancelled"))
    db.commit()
    assert load_progress(db, user.id).progress.has_rsvp is False


def test_without_active_event_nothing_is_rsvpd(db, make_user):
    user = make_user()
    progress = load_progress(db, user.id).progress
    assert progress.has_rsvp is False
    assert progress.has_uploaded is False


def test_resolver_reads_from_store(session_factory, make_user):
    user = make_user()
    resolver = ProgressResolver(session_factory=session_factory, timeout=2)

    snapshot = asyncio.run(resolver.resolve(user.id))

    assert snapshot.state is ProgressState.resolved
    assert snapshot.progress.onboarding_complete is True


def test_resolver_without_identity(session_factory):
    resolver = ProgressResolver(session_factory=session_factory)
    assert asyncio.run(resolver.resolve(None)).state is ProgressState.unauthenticated


def test_resolver_timeout_falls_back_to_unauthenticated(session_factory, monkeypatch):
    resolver = ProgressResolver(session_factory=session_factory, timeout=0.05)

    def slow_load(user_id):
        time.sleep(0.5)
        return ProgressSnapshot.resolved(ProgressModel(authenticated=True))

    monkeypatch.setattr(resolver, "_load", slow_load)

    assert asyncio.run(resolver.resolve(uuid.uuid4())).state is ProgressState.unauthenticated


def test_resolver_store_failure_falls_back_to_unauthenticated(session_factory, monkeypatch):
    resolver = ProgressResolver(session_factory=session_factory)

    def broken_load(user_id):
        raise TransientStoreError("connection reset")

    monkeypatch.setattr(resolver, "_load", broken_load)

    assert asyncio.run(resolver.resolve(uuid.uuid4())).state is ProgressState.unauthenticated


def test_broadcaster_delivers_until_unsubscribed():
    broadcaster = ProgressBroadcaster()
    user_id = uuid.uuid4()
    received = []

    subscription = broadcaster.subscribe(user_id, received.append)
    snapshot = ProgressSnapshot.resolved(ProgressModel(authenticated=True))
    broadcaster.publish(user_id, snapshot)
    broadcaster.publish(uuid.uuid4(), ProgressSnapshot.unauthenticated())

    subscription.unsubscribe()
    subscription.unsubscribe()
    broadcaster.publish(user_id, snapshot)

    assert received == [snapshot]
    assert broadcaster.has_subscribers(user_id) is False


def test_broadcaster_isolates_failing_subscribers():
    broadcaster = ProgressBroadcaster()
    user_id = uuid.uuid4()
    received = []

    def explode(snapshot):
        raise RuntimeError("tab closed")

    broadcaster.subscribe(user_id, explode)
    broadcaster.subscribe(user_id, received.append)
    broadcaster.publish(user_id, ProgressSnapshot.unauthenticated())

    assert len(received) == 1


def test_broadcaster_refresh_reads_current_progress(db, make_user, active_event):
    broadcaster = ProgressBroadcaster()
    user = make_user()
    received = []
    broadcaster.subscribe(user.id, received.append)

    db.add(Rsvp(event_id=active_event.id, user_id=user.id, status="going"))
    db.commit()
    broadcaster.refresh(db, user.id)

    assert received[-1].progress.has_rsvp is True


def test_progress_events_follow_published_snapshots():
    broadcaster = ProgressBroadcaster()
    user_id = uuid.uuid4()
    initial = ProgressSnapshot.resolved(ProgressModel(authenticated=True, onboarding_complete=True))
    updated = ProgressSnapshot.resolved(ProgressModel(authenticated=True, onboarding_complete=True, has_rsvp=True))

    async def scenario():
        events = progress_events(broadcaster, user_id, initial)
        first = await events.__anext__()
        await asyncio.to_thread(broadcaster.publish, user_id, updated)
        second = await asyncio.wait_for(events.__anext__(), 1)
        subscribed = broadcaster.has_subscribers(user_id)
        await events.aclose()
        return first, second, subscribed

    first, second, subscribed = asyncio.run(scenario())

    assert first == initial
    assert second == updated
    assert subscribed is True
    assert broadcaster.has_subscribers(user_id) is False
