import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from main import app  # noqa: E402
from quincy.core.database import Base, get_db  # noqa: E402
from quincy.models.event_db.event_db import Event  # noqa: E402
from quincy.models.event_db.record_db import VinylRecord  # noqa: E402
from quincy.models.event_db.rsvp_db import Rsvp  # noqa: E402
from quincy.models.interest_db.connection_db import Connection  # noqa: E402,F401
from quincy.models.interest_db.interest_db import Interest  # noqa: E402,F401
from quincy.models.interest_db.message_db import Message  # noqa: E402,F401
from quincy.models.user_db.user_db import User  # noqa: E402
from quincy.routes.interest.interest_routers import get_notifier  # noqa: E402
from quincy.routes.navigation.navigation_routers import get_progress_resolver  # noqa: E402
from quincy.services.progress import ProgressResolver  # noqa: E402


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def notify(self, connection, recipient_id):
        self.calls.append((connection.id, recipient_id))


class FailingNotifier:
    def __init__(self):
        self.attempts = 0

    def notify(self, connection, recipient_id):
        self.attempts += 1
        raise RuntimeError("sms gateway down")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_progress_resolver] = lambda: ProgressResolver(
        session_factory=session_factory, timeout=2
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(onboarded=True, **fields):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=fields.pop("email", f"collector{n}@example.com"),
            username=fields.pop("username", f"collector{n}"),
            display_name=fields.pop("display_name", f"Collector {n}"),
            hashed_password="not-a-real-hash",
            onboarding_completed=onboarded,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def active_event(db):
    event = Event(
        title="Quincy Listening Night",
        starts_at=datetime.utcnow() + timedelta(days=3),
        venue_name="The Back Room",
        city="Dallas",
        is_active=True,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture
def attend(db):
    """RSVP a user to an event and optionally upload a record."""

    def _attend(user, event, upload=True, album="Kind of Blue", artist="Miles Davis"):
        db.add(Rsvp(event_id=event.id, user_id=user.id, status="going", source="quincy"))
        record = None
        if upload:
            record = VinylRecord(event_id=event.id, user_id=user.id, typed_album=album, typed_artist=artist)
            db.add(record)
        db.commit()
        if record is not None:
            db.refresh(record)
        return record

    return _attend
